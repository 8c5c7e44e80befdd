"""Navigation endpoint."""

from fastapi import APIRouter, Depends

from procflow.api.v1.dependencies import Actor, get_current_actor, get_template_store
from procflow.api.v1.schemas import MenuItemResponse, MenuResponse
from procflow.domain.access import visible_resources
from procflow.domain.roles import Capability
from procflow.persistence.repositories import TemplateStore


router = APIRouter(prefix="/menu", tags=["menu"])


@router.get(
    "",
    response_model=MenuResponse,
    summary="Get the current actor's navigation",
)
async def get_menu(
    store: TemplateStore = Depends(get_template_store),
    actor: Actor = Depends(get_current_actor),
) -> MenuResponse:
    capabilities = actor.capability_set
    if actor.is_admin:
        capabilities = set(Capability)
    menu = visible_resources(capabilities, await store.list_templates())
    return MenuResponse(
        role=actor.role,
        capabilities=sorted(c.value for c in capabilities),
        items=[MenuItemResponse(**i.to_dict()) for i in menu.items],
        service_processes=[MenuItemResponse(**i.to_dict()) for i in menu.service_processes],
        production_processes=[MenuItemResponse(**i.to_dict()) for i in menu.production_processes],
    )
