"""Order instance model.

An order binds a template id, the node it currently occupies, the dynamic
form data collected for it, and audit timestamps. current_node_id and status
change only through the workflow engine; dynamic_data only through the form
renderer's controlled updates.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from procflow.domain.templates.models import TargetModule


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


ORDER_NUMBER_PREFIXES = {
    TargetModule.SERVICE: "SVC",
    TargetModule.PRODUCTION: "PRD",
}

# customer_name placeholder for orders raised internally by production
INTERNAL_CUSTOMER = "内部生产"


def generate_order_number(module: TargetModule, now: Optional[datetime] = None) -> str:
    """Build an order number like SVC-202610-417."""
    now = now or utcnow()
    prefix = ORDER_NUMBER_PREFIXES.get(module, "ORD")
    return f"{prefix}-{now.year}{now.month:02d}-{random.randint(0, 999)}"


@dataclass
class OrderInstance:
    """A business record executing a process template."""
    id: Optional[str] = None
    template_id: Optional[str] = None
    current_node_id: Optional[str] = None
    status: str = ""
    dynamic_data: Dict[str, Any] = field(default_factory=dict)
    assigned_to: Optional[str] = None

    # Domain fields carried by service and production orders
    order_number: str = ""
    module: Optional[TargetModule] = None
    machine_sn: str = ""
    customer_name: str = ""
    fault_description: str = ""

    template_revision: Optional[int] = None
    version: int = 1
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_templated(self) -> bool:
        """False for legacy orders created without a template."""
        return self.template_id is not None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "OrderInstance":
        module = raw.get("module")
        return cls(
            id=raw.get("id"),
            template_id=raw.get("template_id"),
            current_node_id=raw.get("current_node_id"),
            status=raw.get("status", ""),
            dynamic_data=dict(raw.get("dynamic_data") or {}),
            assigned_to=raw.get("assigned_to"),
            order_number=raw.get("order_number", ""),
            module=TargetModule(module) if module else None,
            machine_sn=raw.get("machine_sn", ""),
            customer_name=raw.get("customer_name", ""),
            fault_description=raw.get("fault_description", ""),
            template_revision=raw.get("template_revision"),
            version=raw.get("version", 1),
            created_at=_parse_datetime(raw.get("created_at")),
            updated_at=_parse_datetime(raw.get("updated_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "current_node_id": self.current_node_id,
            "status": self.status,
            "dynamic_data": dict(self.dynamic_data),
            "assigned_to": self.assigned_to,
            "order_number": self.order_number,
            "module": self.module.value if self.module else None,
            "machine_sn": self.machine_sn,
            "customer_name": self.customer_name,
            "fault_description": self.fault_description,
            "template_revision": self.template_revision,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return utcnow()
