"""Order endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from procflow.api.v1.dependencies import (
    Actor,
    get_current_actor,
    get_order_service,
    require_capability,
)
from procflow.api.v1.exceptions import ValidationError
from procflow.api.v1.schemas import (
    AssignRequest,
    CreateOrderRequest,
    DisplayFieldResponse,
    ErrorResponse,
    FieldUploadRequest,
    FieldUploadResponse,
    LegalTargetsResponse,
    OrderListResponse,
    OrderResponse,
    OrderViewResponse,
    TransitionRequest,
    UpdateDataRequest,
    WorkflowNodeSchema,
)
from procflow.domain.errors import StructuralGraphError
from procflow.domain.orders.service import OrderService
from procflow.domain.roles import PRODUCTION_ENTRY_CAPABILITIES, Capability
from procflow.domain.templates.models import TargetModule
from procflow.persistence.repositories import OrderFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

require_order_editor = require_capability(Capability.MANAGE_ORDERS, *sorted(PRODUCTION_ENTRY_CAPABILITIES))
require_order_manager = require_capability(Capability.MANAGE_ORDERS)


@router.get(
    "",
    response_model=OrderListResponse,
    summary="List orders",
)
async def list_orders(
    template_id: Optional[str] = Query(None),
    module: Optional[TargetModule] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    assigned_to: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search order number, machine SN or customer"),
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(get_current_actor),
) -> OrderListResponse:
    orders = await service.list_orders(OrderFilter(
        template_id=template_id,
        module=module,
        status=status_filter,
        assigned_to=assigned_to,
        search=q,
    ))
    return OrderListResponse(
        orders=[OrderResponse.from_order(o) for o in orders],
        total=len(orders),
    )


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an order from a template",
    responses={
        404: {"model": ErrorResponse, "description": "Template not found"},
        422: {"model": ErrorResponse, "description": "Form validation failed"},
    },
)
async def create_order(
    request: CreateOrderRequest,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(get_current_actor),
) -> OrderResponse:
    order = await service.create_order(
        template_id=request.template_id,
        machine_sn=request.machine_sn,
        dynamic_data=request.dynamic_data,
        customer_name=request.customer_name,
        fault_description=request.fault_description,
        assigned_to=request.assigned_to,
    )
    return OrderResponse.from_order(order)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses={404: {"model": ErrorResponse, "description": "Order not found"}},
)
async def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(get_current_actor),
) -> OrderResponse:
    return OrderResponse.from_order(await service.get_order(order_id))


@router.get(
    "/{order_id}/view",
    response_model=OrderViewResponse,
    summary="Get order with read-only form projection",
)
async def view_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(get_current_actor),
) -> OrderViewResponse:
    order, fields = await service.project_order(order_id)
    return OrderViewResponse(
        order=OrderResponse.from_order(order),
        fields=[DisplayFieldResponse.from_display(f) for f in fields],
    )


@router.get(
    "/{order_id}/targets",
    response_model=LegalTargetsResponse,
    summary="List actions available on an order",
)
async def get_order_targets(
    order_id: str,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(get_current_actor),
) -> LegalTargetsResponse:
    order = await service.get_order(order_id)
    if order.template_id is None or order.current_node_id is None:
        raise StructuralGraphError(f"Order '{order_id}' is not bound to a process template")
    targets = await service.get_legal_targets(order.template_id, order.current_node_id)
    return LegalTargetsResponse(
        template_id=order.template_id,
        node_id=order.current_node_id,
        targets=[WorkflowNodeSchema.from_node(t) for t in targets],
    )


@router.post(
    "/{order_id}/transition",
    response_model=OrderResponse,
    summary="Move an order along its workflow",
    responses={
        403: {"model": ErrorResponse, "description": "Role may not act on the current node"},
        409: {"model": ErrorResponse, "description": "Illegal target or concurrent modification"},
        422: {"model": ErrorResponse, "description": "Broken workflow graph"},
    },
)
async def transition_order(
    order_id: str,
    request: TransitionRequest,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(get_current_actor),
) -> OrderResponse:
    order = await service.attempt_transition(
        order_id,
        request.target_node_id,
        actor.role,
        actor.capability_set,
    )
    return OrderResponse.from_order(order)


@router.patch(
    "/{order_id}/data",
    response_model=OrderResponse,
    summary="Edit an order's form data",
)
async def update_order_data(
    order_id: str,
    request: UpdateDataRequest,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(require_order_editor),
) -> OrderResponse:
    order = await service.update_dynamic_data(order_id, request.changes, request.expected_version)
    return OrderResponse.from_order(order)


@router.post(
    "/{order_id}/files",
    response_model=FieldUploadResponse,
    summary="Upload a file for a file field",
    description="A failed upload leaves the order unchanged and reports the error for the field.",
)
async def upload_order_file(
    order_id: str,
    request: FieldUploadRequest,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(require_order_editor),
) -> FieldUploadResponse:
    try:
        order, error = await service.upload_field_file(
            order_id,
            request.field_id,
            request.filename,
            request.content,
            request.type,
        )
    except (KeyError, ValueError) as e:
        raise ValidationError(str(e).strip("'"), details={"field_id": request.field_id})
    return FieldUploadResponse(order=OrderResponse.from_order(order), error=error)


@router.post(
    "/{order_id}/assign",
    response_model=OrderResponse,
    summary="Reassign an order",
    description="Assignment is independent of the workflow role gates.",
)
async def assign_order(
    order_id: str,
    request: AssignRequest,
    service: OrderService = Depends(get_order_service),
    actor: Actor = Depends(require_order_manager),
) -> OrderResponse:
    order = await service.reassign(order_id, request.assigned_to, request.expected_version)
    return OrderResponse.from_order(order)
