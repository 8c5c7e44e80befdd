"""Order-related API schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from procflow.domain.forms.renderer import DisplayField
from procflow.domain.orders.models import OrderInstance


class OrderResponse(BaseModel):
    """Order instance."""

    id: str
    order_number: str
    template_id: Optional[str] = None
    template_revision: Optional[int] = None
    module: Optional[str] = None
    current_node_id: Optional[str] = None
    status: str
    dynamic_data: Dict[str, Any] = Field(default_factory=dict)
    assigned_to: Optional[str] = None
    machine_sn: str = ""
    customer_name: str = ""
    fault_description: str = ""
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: OrderInstance) -> "OrderResponse":
        return cls.model_validate(order.to_dict())


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    total: int


class CreateOrderRequest(BaseModel):
    """Submission of a template's creation form."""

    template_id: str
    machine_sn: str = ""
    customer_name: Optional[str] = None
    fault_description: Optional[str] = None
    assigned_to: Optional[str] = None
    dynamic_data: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"json_schema_extra": {
        "example": {
            "template_id": "tpl_1700000000000",
            "machine_sn": "HM217S007647",
            "customer_name": "北京字节跳动科技有限公司",
            "dynamic_data": {"f_1700000000001": "138..."},
        }
    }}


class TransitionRequest(BaseModel):
    target_node_id: str


class UpdateDataRequest(BaseModel):
    """Field edits keyed by field id (or label)."""

    changes: Dict[str, Any]
    expected_version: Optional[int] = None


class AssignRequest(BaseModel):
    assigned_to: Optional[str] = None
    expected_version: Optional[int] = None


class FieldUploadRequest(BaseModel):
    """File for one file field; content is a base64 data URL."""

    field_id: str
    filename: str
    content: str
    type: Optional[str] = None


class FieldUploadResponse(BaseModel):
    """Upload result; on failure the order is unchanged and error is set."""

    order: OrderResponse
    error: Optional[str] = None


class DisplayFieldResponse(BaseModel):
    field_id: str
    label: str
    kind: str
    text: str = ""
    href: Optional[str] = None
    chips: List[str] = Field(default_factory=list)

    @classmethod
    def from_display(cls, display: DisplayField) -> "DisplayFieldResponse":
        return cls(
            field_id=display.field_id,
            label=display.label,
            kind=display.kind.value,
            text=display.text,
            href=display.href,
            chips=list(display.chips),
        )


class OrderViewResponse(BaseModel):
    """Order with the read-only projection of its form data."""

    order: OrderResponse
    fields: List[DisplayFieldResponse]
