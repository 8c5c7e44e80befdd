"""API schema models."""

from procflow.api.v1.schemas.common import ErrorResponse, HealthResponse
from procflow.api.v1.schemas.template import (
    FormDataValidationRequest,
    FormDataValidationResponse,
    FormFieldSchema,
    LegalTargetsResponse,
    TemplateIssueResponse,
    TemplateListResponse,
    TemplatePayload,
    TemplateResponse,
    TemplateSaveResponse,
    TemplateValidationResponse,
    WorkflowNodeSchema,
)
from procflow.api.v1.schemas.order import (
    AssignRequest,
    CreateOrderRequest,
    DisplayFieldResponse,
    FieldUploadRequest,
    FieldUploadResponse,
    OrderListResponse,
    OrderResponse,
    OrderViewResponse,
    TransitionRequest,
    UpdateDataRequest,
)
from procflow.api.v1.schemas.upload import (
    MenuItemResponse,
    MenuResponse,
    UploadRequest,
    UploadResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "FormDataValidationRequest",
    "FormDataValidationResponse",
    "FormFieldSchema",
    "LegalTargetsResponse",
    "TemplateIssueResponse",
    "TemplateListResponse",
    "TemplatePayload",
    "TemplateResponse",
    "TemplateSaveResponse",
    "TemplateValidationResponse",
    "WorkflowNodeSchema",
    "AssignRequest",
    "CreateOrderRequest",
    "DisplayFieldResponse",
    "FieldUploadRequest",
    "FieldUploadResponse",
    "OrderListResponse",
    "OrderResponse",
    "OrderViewResponse",
    "TransitionRequest",
    "UpdateDataRequest",
    "MenuItemResponse",
    "MenuResponse",
    "UploadRequest",
    "UploadResponse",
]
