"""API v1 module."""

from fastapi import APIRouter

from procflow.api.v1.routers import (
    menu_router,
    orders_router,
    templates_router,
    uploads_router,
)


# Create main v1 router
api_router = APIRouter(prefix="/api/v1")

# Include sub-routers
api_router.include_router(templates_router)
api_router.include_router(orders_router)
api_router.include_router(uploads_router)
api_router.include_router(menu_router)


__all__ = ["api_router"]
