"""Capability-driven navigation.

The menu is a pure function of the actor's capability set and the available
templates, computed per request; there is no shared mutable menu state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List

from procflow.domain.roles import PRODUCTION_ENTRY_CAPABILITIES, Capability
from procflow.domain.templates.models import ProcessTemplate, TargetModule


@dataclass(frozen=True)
class MenuItem:
    """A navigable resource."""
    key: str
    label: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "label": self.label, "path": self.path}


@dataclass
class MenuModel:
    """Resources visible to one actor."""
    items: List[MenuItem] = field(default_factory=list)
    service_processes: List[MenuItem] = field(default_factory=list)
    production_processes: List[MenuItem] = field(default_factory=list)

    @property
    def keys(self) -> List[str]:
        return [item.key for item in self.items]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self.items],
            "service_processes": [i.to_dict() for i in self.service_processes],
            "production_processes": [i.to_dict() for i in self.production_processes],
        }


# Static resources, each shown when the actor holds any of the listed capabilities
STATIC_RESOURCES: List[tuple] = [
    (MenuItem("dashboard", "数据仪表盘", "/dashboard"), frozenset({Capability.VIEW_DASHBOARD})),
    (MenuItem("orders", "售后工单管理", "/orders"), frozenset({Capability.VIEW_ORDERS})),
    (MenuItem("production_list", "生产数据查询", "/production/list"), frozenset({Capability.PROD_QUERY})),
    (MenuItem("production_entry", "生产录入系统", "/production/entry"), PRODUCTION_ENTRY_CAPABILITIES),
    (MenuItem("production_repair", "生产维修", "/production/repair"), frozenset({Capability.PROD_REPAIR})),
    (MenuItem("designer", "流程设计器", "/admin/designer"), frozenset({Capability.DESIGN_PROCESS})),
    (MenuItem("admin", "系统管理配置", "/admin"), frozenset({Capability.MANAGE_SYSTEM})),
]

SERVICE_PROCESS_CAPABILITIES: FrozenSet[Capability] = frozenset({Capability.VIEW_ORDERS})
PRODUCTION_PROCESS_CAPABILITIES: FrozenSet[Capability] = (
    frozenset({Capability.PROD_QUERY}) | PRODUCTION_ENTRY_CAPABILITIES
)


def visible_resources(
    actor_permissions: Iterable[Capability],
    templates: Iterable[ProcessTemplate],
) -> MenuModel:
    """Build the menu for an actor.

    Service templates appear under the orders capability, production
    templates under production query or any production entry capability.
    """
    held = set(actor_permissions)
    menu = MenuModel()

    for item, required in STATIC_RESOURCES:
        if held & required:
            menu.items.append(item)

    show_service = bool(held & SERVICE_PROCESS_CAPABILITIES)
    show_production = bool(held & PRODUCTION_PROCESS_CAPABILITIES)

    for template in templates:
        entry = MenuItem(f"process:{template.id}", template.name, f"/process/{template.id}")
        if template.target_module == TargetModule.SERVICE and show_service:
            menu.service_processes.append(entry)
        elif template.target_module == TargetModule.PRODUCTION and show_production:
            menu.production_processes.append(entry)

    return menu
