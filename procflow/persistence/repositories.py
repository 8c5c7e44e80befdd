"""Repository protocols and in-memory implementations.

Every read and write hands out copies: callers never share mutable state
with the store, so a fetched record changes only through an explicit save
or update.
"""

import copy
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from procflow.domain.errors import (
    ConcurrentModificationError,
    OrderNotFoundError,
    TemplateNotFoundError,
)
from procflow.domain.orders.models import OrderInstance
from procflow.domain.templates.models import ProcessTemplate, TargetModule, new_template_id

# Fields update_order() may replace. Identity and audit fields are owned by the store.
UPDATABLE_ORDER_FIELDS = frozenset({
    "current_node_id",
    "status",
    "dynamic_data",
    "assigned_to",
    "machine_sn",
    "customer_name",
    "fault_description",
})


def new_order_id() -> str:
    return uuid.uuid4().hex


@dataclass
class OrderFilter:
    """Optional criteria for list_orders(); unset fields match everything."""
    template_id: Optional[str] = None
    module: Optional[TargetModule] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    search: Optional[str] = None

    def matches(self, order: OrderInstance) -> bool:
        if self.template_id is not None and order.template_id != self.template_id:
            return False
        if self.module is not None and order.module != self.module:
            return False
        if self.status is not None and order.status != self.status:
            return False
        if self.assigned_to is not None and order.assigned_to != self.assigned_to:
            return False
        if self.search:
            needle = self.search.lower()
            haystack = (order.order_number, order.machine_sn, order.customer_name)
            if not any(needle in (value or "").lower() for value in haystack):
                return False
        return True


def check_update_fields(fields: Dict[str, Any]) -> None:
    """Reject fields update_order() does not own."""
    unknown = set(fields) - UPDATABLE_ORDER_FIELDS
    if unknown:
        raise ValueError(f"Order fields cannot be updated: {', '.join(sorted(unknown))}")


@runtime_checkable
class TemplateStore(Protocol):
    """Protocol for process template storage."""

    async def list_templates(self) -> List[ProcessTemplate]:
        """List all templates."""
        ...

    async def get_template(self, template_id: str) -> ProcessTemplate:
        """Get template by id. Raises TemplateNotFoundError."""
        ...

    async def save_template(self, template: ProcessTemplate) -> ProcessTemplate:
        """Upsert by id; generates an id on first save."""
        ...


@runtime_checkable
class OrderRepository(Protocol):
    """Protocol for order storage."""

    async def list_orders(self, order_filter: Optional[OrderFilter] = None) -> List[OrderInstance]:
        """List orders, newest first."""
        ...

    async def get_order(self, order_id: str) -> OrderInstance:
        """Get order by id. Raises OrderNotFoundError."""
        ...

    async def create_order(self, order: OrderInstance) -> OrderInstance:
        """Persist a new order and return it with its assigned id."""
        ...

    async def update_order(
        self,
        order_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> OrderInstance:
        """Replace the given fields wholesale; others are untouched.

        Raises ConcurrentModificationError when expected_version is given
        and does not match the stored version.
        """
        ...


class InMemoryTemplateStore:
    """In-memory template store for testing and database-less runs."""

    def __init__(self):
        self._templates: Dict[str, ProcessTemplate] = {}

    async def list_templates(self) -> List[ProcessTemplate]:
        return [copy.deepcopy(t) for t in self._templates.values()]

    async def get_template(self, template_id: str) -> ProcessTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return copy.deepcopy(template)

    async def save_template(self, template: ProcessTemplate) -> ProcessTemplate:
        now = datetime.now(timezone.utc)
        template_id = template.id or new_template_id()
        existing = self._templates.get(template_id)

        stored = replace(
            copy.deepcopy(template),
            id=template_id,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            revision=(existing.revision if existing else 0) + 1,
        )
        self._templates[template_id] = stored
        return copy.deepcopy(stored)


class InMemoryOrderRepository:
    """In-memory order repository for testing and database-less runs."""

    def __init__(self):
        self._orders: Dict[str, OrderInstance] = {}

    async def list_orders(self, order_filter: Optional[OrderFilter] = None) -> List[OrderInstance]:
        order_filter = order_filter or OrderFilter()
        orders = [o for o in self._orders.values() if order_filter.matches(o)]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [copy.deepcopy(o) for o in orders]

    async def get_order(self, order_id: str) -> OrderInstance:
        order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return copy.deepcopy(order)

    async def create_order(self, order: OrderInstance) -> OrderInstance:
        now = datetime.now(timezone.utc)
        stored = replace(
            copy.deepcopy(order),
            id=order.id or new_order_id(),
            version=1,
            created_at=now,
            updated_at=now,
        )
        self._orders[stored.id] = stored
        return copy.deepcopy(stored)

    async def update_order(
        self,
        order_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> OrderInstance:
        check_update_fields(fields)
        existing = self._orders.get(order_id)
        if existing is None:
            raise OrderNotFoundError(order_id)
        if expected_version is not None and existing.version != expected_version:
            raise ConcurrentModificationError(order_id, expected_version, existing.version)

        updated = replace(
            existing,
            **copy.deepcopy(fields),
            version=existing.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        self._orders[order_id] = updated
        return copy.deepcopy(updated)
