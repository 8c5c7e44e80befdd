"""Process template endpoints."""

from fastapi import APIRouter, Depends, Query

from procflow.api.v1.dependencies import (
    Actor,
    get_order_service,
    get_template_service,
    require_capability,
)
from procflow.api.v1.schemas import (
    ErrorResponse,
    FormDataValidationRequest,
    FormDataValidationResponse,
    LegalTargetsResponse,
    TemplateListResponse,
    TemplatePayload,
    TemplateResponse,
    TemplateSaveResponse,
    TemplateValidationResponse,
    WorkflowNodeSchema,
)
from procflow.domain.orders.service import OrderService
from procflow.domain.roles import Capability
from procflow.domain.templates.defaults import default_template
from procflow.domain.templates.models import TargetModule
from procflow.domain.templates.service import TemplateService


router = APIRouter(prefix="/templates", tags=["templates"])

require_designer = require_capability(Capability.DESIGN_PROCESS, Capability.MANAGE_SYSTEM)


@router.get(
    "",
    response_model=TemplateListResponse,
    summary="List process templates",
)
async def list_templates(
    service: TemplateService = Depends(get_template_service),
) -> TemplateListResponse:
    templates = await service.list_templates()
    return TemplateListResponse(
        templates=[TemplateResponse.from_template(t) for t in templates],
        total=len(templates),
    )


@router.get(
    "/default",
    response_model=TemplateResponse,
    summary="Get the designer's starting template",
)
async def get_default_template(
    target_module: TargetModule = Query(TargetModule.SERVICE, alias="targetModule"),
) -> TemplateResponse:
    return TemplateResponse.from_template(default_template(target_module))


@router.get(
    "/{template_id}",
    response_model=TemplateResponse,
    summary="Get process template",
    responses={404: {"model": ErrorResponse, "description": "Template not found"}},
)
async def get_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service),
) -> TemplateResponse:
    return TemplateResponse.from_template(await service.get_template(template_id))


@router.post(
    "",
    response_model=TemplateSaveResponse,
    summary="Save process template",
    description="Upsert by id; a time-based id is generated on first save. "
                "Validation findings are advisory unless strict validation is enabled.",
)
async def save_template(
    payload: TemplatePayload,
    service: TemplateService = Depends(get_template_service),
    actor: Actor = Depends(require_designer),
) -> TemplateSaveResponse:
    saved, result = await service.save_template(payload.to_raw())
    return TemplateSaveResponse(
        template=TemplateResponse.from_template(saved),
        validation=TemplateValidationResponse.from_result(result),
    )


@router.put(
    "/{template_id}",
    response_model=TemplateSaveResponse,
    summary="Save process template under a given id",
)
async def put_template(
    template_id: str,
    payload: TemplatePayload,
    service: TemplateService = Depends(get_template_service),
    actor: Actor = Depends(require_designer),
) -> TemplateSaveResponse:
    raw = payload.to_raw()
    raw["id"] = template_id
    saved, result = await service.save_template(raw)
    return TemplateSaveResponse(
        template=TemplateResponse.from_template(saved),
        validation=TemplateValidationResponse.from_result(result),
    )


@router.post(
    "/validate",
    response_model=TemplateValidationResponse,
    summary="Validate a template without saving",
)
async def validate_template(
    payload: TemplatePayload,
    service: TemplateService = Depends(get_template_service),
) -> TemplateValidationResponse:
    return TemplateValidationResponse.from_result(service.validate(payload.to_raw()))


@router.get(
    "/{template_id}/nodes/{node_id}/targets",
    response_model=LegalTargetsResponse,
    summary="List legal targets from a node",
    description="Exclusive gateways are flattened into their branches.",
    responses={
        404: {"model": ErrorResponse, "description": "Template not found"},
        422: {"model": ErrorResponse, "description": "Broken workflow graph"},
    },
)
async def get_legal_targets(
    template_id: str,
    node_id: str,
    orders: OrderService = Depends(get_order_service),
) -> LegalTargetsResponse:
    targets = await orders.get_legal_targets(template_id, node_id)
    return LegalTargetsResponse(
        template_id=template_id,
        node_id=node_id,
        targets=[WorkflowNodeSchema.from_node(t) for t in targets],
    )


@router.post(
    "/{template_id}/validate-data",
    response_model=FormDataValidationResponse,
    summary="Validate form data against a template",
)
async def validate_form_data(
    template_id: str,
    request: FormDataValidationRequest,
    orders: OrderService = Depends(get_order_service),
) -> FormDataValidationResponse:
    errors = await orders.validate_form_data(template_id, request.data)
    return FormDataValidationResponse(valid=not errors, errors=errors)
