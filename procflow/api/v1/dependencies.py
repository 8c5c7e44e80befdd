"""FastAPI dependency injection for API endpoints."""

from functools import lru_cache
from typing import Callable, List, Optional, Set

from fastapi import Depends, Header
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from procflow.api.v1.exceptions import ForbiddenError
from procflow.core.database import create_engine, create_session_factory
from procflow.domain.orders.service import OrderService, OrderServiceConfig
from procflow.domain.roles import Capability, get_role_capabilities, is_administrator, parse_capabilities
from procflow.domain.templates.service import TemplateService
from procflow.integrations.notifications import LoggingNotifier, Notifier, WebhookNotifier
from procflow.integrations.uploads import LocalUploadStore, UploadStore
from procflow.persistence.repositories import (
    InMemoryOrderRepository,
    InMemoryTemplateStore,
    OrderRepository,
    TemplateStore,
)
from procflow.persistence.sql_repositories import SQLOrderRepository, SQLTemplateStore
from procflow.settings import Settings, get_settings


class Actor(BaseModel):
    """Authenticated actor as seen by the API."""

    actor_id: Optional[str] = None
    role: str
    capabilities: List[Capability] = []

    @property
    def capability_set(self) -> Set[Capability]:
        return set(self.capabilities)

    @property
    def is_admin(self) -> bool:
        return is_administrator(self.role, self.capabilities)


def get_current_actor(
    x_actor_role: Optional[str] = Header(default=None),
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_capabilities: Optional[str] = Header(default=None),
) -> Actor:
    """Resolve the actor from identity headers set by the auth proxy.

    Capabilities default to the role's default set when not supplied.
    """
    if not x_actor_role:
        raise ForbiddenError("Missing actor identity")
    role = x_actor_role.strip()
    if x_actor_capabilities is not None:
        capabilities = parse_capabilities(c.strip() for c in x_actor_capabilities.split(","))
    else:
        capabilities = get_role_capabilities(role)
    return Actor(actor_id=x_actor_id, role=role, capabilities=sorted(capabilities))


def require_capability(*required: Capability) -> Callable[..., Actor]:
    """Dependency requiring any of the given capabilities (admins always pass)."""

    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.is_admin or actor.capability_set & set(required):
            return actor
        raise ForbiddenError(
            f"Role '{actor.role}' lacks capability {' or '.join(c.value for c in required)}",
            details={"required": [c.value for c in required]},
        )

    return dependency


# =============================================================================
# Persistence
# =============================================================================

@lru_cache
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return create_engine(settings.database_url, echo=settings.database_echo)


@lru_cache
def get_session_factory() -> async_sessionmaker:
    return create_session_factory(get_engine())


@lru_cache
def get_template_store() -> TemplateStore:
    """Template store; SQL when DATABASE_URL is set, in-memory otherwise."""
    if get_settings().uses_database:
        return SQLTemplateStore(get_session_factory())
    return InMemoryTemplateStore()


@lru_cache
def get_order_repository() -> OrderRepository:
    """Order repository; SQL when DATABASE_URL is set, in-memory otherwise."""
    if get_settings().uses_database:
        return SQLOrderRepository(get_session_factory())
    return InMemoryOrderRepository()


# =============================================================================
# Collaborators
# =============================================================================

@lru_cache
def get_notifier() -> Notifier:
    settings = get_settings()
    if settings.has_webhooks:
        return WebhookNotifier(
            wecom_webhook=settings.wecom_webhook,
            dingtalk_webhook=settings.dingtalk_webhook,
            feishu_webhook=settings.feishu_webhook,
        )
    return LoggingNotifier()


@lru_cache
def get_upload_store() -> UploadStore:
    settings = get_settings()
    return LocalUploadStore(settings.upload_dir, max_bytes=settings.upload_max_bytes)


# =============================================================================
# Services
# =============================================================================

def get_template_service(
    store: TemplateStore = Depends(get_template_store),
    settings: Settings = Depends(get_settings),
) -> TemplateService:
    return TemplateService(store, strict=settings.strict_template_validation)


def get_order_service(
    templates: TemplateStore = Depends(get_template_store),
    orders: OrderRepository = Depends(get_order_repository),
    notifier: Notifier = Depends(get_notifier),
    uploads: UploadStore = Depends(get_upload_store),
    settings: Settings = Depends(get_settings),
) -> OrderService:
    return OrderService(
        templates,
        orders,
        notifier=notifier,
        uploads=uploads,
        config=OrderServiceConfig(
            advance_past_start=settings.advance_past_start,
            storage_mode=settings.storage_mode,
            upload_url_prefix=settings.upload_url_prefix,
            default_assignee_id=settings.default_assignee_id,
        ),
    )


def clear_caches() -> None:
    """Clear cached dependencies (for testing)."""
    get_settings.cache_clear()
    get_engine.cache_clear()
    get_session_factory.cache_clear()
    get_template_store.cache_clear()
    get_order_repository.cache_clear()
    get_notifier.cache_clear()
    get_upload_store.cache_clear()
