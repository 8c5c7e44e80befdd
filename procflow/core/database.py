"""
Database engine and session management.

Only used when DATABASE_URL is set; otherwise the application runs on the
in-memory stores.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from procflow.persistence.orm import Base

logger = logging.getLogger(__name__)

# Sync driver URLs mapped to their async drivers
_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def to_async_url(database_url: str) -> str:
    """Convert a plain database URL to its async driver form."""
    for prefix, async_prefix in _ASYNC_DRIVERS.items():
        if database_url.startswith(prefix):
            return database_url.replace(prefix, async_prefix, 1)
    return database_url


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(to_async_url(database_url), echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory for the SQL repositories."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_database(engine: AsyncEngine) -> None:
    """
    Create tables if they don't exist.

    Note: intended for development and tests; production schemas are managed
    out of band.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")
