"""Test fixtures for API tests."""

import asyncio
from typing import Dict

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from procflow.api.v1 import api_router
from procflow.api.v1.dependencies import (
    clear_caches,
    get_notifier,
    get_order_repository,
    get_template_store,
    get_upload_store,
)
from procflow.api.v1.error_handlers import register_error_handlers
from procflow.persistence.repositories import InMemoryOrderRepository, InMemoryTemplateStore
from procflow.settings import Settings, get_settings
from tests.helpers.factories import RecordingNotifier, StubUploadStore, sample_template


def actor_headers(role: str, capabilities: str = None, actor_id: str = "u_test") -> Dict[str, str]:
    """Identity headers as set by the auth proxy."""
    headers = {"X-Actor-Role": role, "X-Actor-Id": actor_id}
    if capabilities is not None:
        headers["X-Actor-Capabilities"] = capabilities
    return headers


@pytest.fixture
def template_store() -> InMemoryTemplateStore:
    """Template store seeded with the approval/repair template."""
    store = InMemoryTemplateStore()
    asyncio.run(store.save_template(sample_template()))
    return store


@pytest.fixture
def order_repo() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def api_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def api_uploads() -> StubUploadStore:
    return StubUploadStore()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(upload_url_prefix="/data")


@pytest.fixture
def app(template_store, order_repo, api_notifier, api_uploads, test_settings) -> FastAPI:
    """Create test FastAPI application."""
    clear_caches()

    test_app = FastAPI(title="Test API")
    register_error_handlers(test_app)
    test_app.include_router(api_router)

    # Override dependencies
    test_app.dependency_overrides[get_template_store] = lambda: template_store
    test_app.dependency_overrides[get_order_repository] = lambda: order_repo
    test_app.dependency_overrides[get_notifier] = lambda: api_notifier
    test_app.dependency_overrides[get_upload_store] = lambda: api_uploads
    test_app.dependency_overrides[get_settings] = lambda: test_settings

    yield test_app

    # Cleanup
    test_app.dependency_overrides.clear()
    clear_caches()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def manager() -> Dict[str, str]:
    return actor_headers("MANAGER")


@pytest.fixture
def technician() -> Dict[str, str]:
    return actor_headers("TECHNICIAN")


@pytest.fixture
def admin() -> Dict[str, str]:
    return actor_headers("ADMIN")
