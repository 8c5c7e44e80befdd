"""API routers."""

from procflow.api.v1.routers.templates import router as templates_router
from procflow.api.v1.routers.orders import router as orders_router
from procflow.api.v1.routers.uploads import router as uploads_router
from procflow.api.v1.routers.menu import router as menu_router


__all__ = [
    "templates_router",
    "orders_router",
    "uploads_router",
    "menu_router",
]
