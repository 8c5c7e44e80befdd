"""
FastAPI application for the process platform.

Run with: python -m procflow.api.main
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from procflow import __version__
from procflow.api.v1 import api_router
from procflow.api.v1.dependencies import get_engine
from procflow.api.v1.error_handlers import register_error_handlers
from procflow.api.v1.schemas import HealthResponse
from procflow.core.database import init_database
from procflow.core.logging import configure_logging
from procflow.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} ({settings.environment})")

    if settings.uses_database:
        await init_database(get_engine())
    else:
        logger.info("DATABASE_URL not set, using in-memory stores")

    yield

    if settings.uses_database:
        await get_engine().dispose()
    logger.info(f"Shutting down {settings.app_name}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, format_type=settings.log_format)

    app = FastAPI(
        title=settings.app_name,
        description="Configurable process engine: dynamic forms and workflow graphs",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    # Uploaded files, referenced by name from file fields
    app.mount(
        settings.upload_url_prefix.rstrip("/") or "/data",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "procflow.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
