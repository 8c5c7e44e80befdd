"""Template store and order persistence."""

from procflow.persistence.repositories import (
    InMemoryOrderRepository,
    InMemoryTemplateStore,
    OrderFilter,
    OrderRepository,
    TemplateStore,
)

__all__ = [
    "InMemoryOrderRepository",
    "InMemoryTemplateStore",
    "OrderFilter",
    "OrderRepository",
    "TemplateStore",
]
