"""Roles and capabilities."""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, Set


class UserRole(str, Enum):
    """Actor roles referenced by workflow node gates."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    TECHNICIAN = "TECHNICIAN"
    PRODUCTION = "PRODUCTION"

    def __str__(self) -> str:
        return self.value


class Capability(str, Enum):
    """System capabilities."""
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    VIEW_ORDERS = "VIEW_ORDERS"
    MANAGE_ORDERS = "MANAGE_ORDERS"
    DESIGN_PROCESS = "DESIGN_PROCESS"
    MANAGE_SYSTEM = "MANAGE_SYSTEM"
    PROD_ENTRY_ASSEMBLY = "PROD_ENTRY_ASSEMBLY"
    PROD_ENTRY_INSPECT_INIT = "PROD_ENTRY_INSPECT_INIT"
    PROD_ENTRY_AGING = "PROD_ENTRY_AGING"
    PROD_ENTRY_INSPECT_FINAL = "PROD_ENTRY_INSPECT_FINAL"
    PROD_REPAIR = "PROD_REPAIR"
    PROD_QUERY = "PROD_QUERY"

    def __str__(self) -> str:
        return self.value


PRODUCTION_ENTRY_CAPABILITIES: FrozenSet[Capability] = frozenset({
    Capability.PROD_ENTRY_ASSEMBLY,
    Capability.PROD_ENTRY_INSPECT_INIT,
    Capability.PROD_ENTRY_AGING,
    Capability.PROD_ENTRY_INSPECT_FINAL,
})

# Default capability sets granted with each role
ROLE_CAPABILITIES: Dict[str, FrozenSet[Capability]] = {
    UserRole.ADMIN.value: frozenset(Capability),
    UserRole.MANAGER.value: frozenset({
        Capability.VIEW_DASHBOARD,
        Capability.VIEW_ORDERS,
        Capability.MANAGE_ORDERS,
        Capability.PROD_QUERY,
    }),
    UserRole.TECHNICIAN.value: frozenset({
        Capability.VIEW_DASHBOARD,
        Capability.VIEW_ORDERS,
        Capability.MANAGE_ORDERS,
    }),
    UserRole.PRODUCTION.value: frozenset({
        Capability.VIEW_DASHBOARD,
        Capability.PROD_ENTRY_ASSEMBLY,
        Capability.PROD_ENTRY_INSPECT_INIT,
        Capability.PROD_QUERY,
    }),
}


def get_role_capabilities(role: str) -> Set[Capability]:
    """Get default capabilities for a role."""
    return set(ROLE_CAPABILITIES.get(str(role), {Capability.VIEW_DASHBOARD}))


def parse_capabilities(values: Iterable[str]) -> Set[Capability]:
    """Parse capability names, ignoring unknown ones."""
    known = {c.value for c in Capability}
    return {Capability(v) for v in values if v in known}


def is_administrator(role: str, capabilities: Iterable[Capability] = ()) -> bool:
    """True if the actor holds the system administrator capability."""
    if str(role) == UserRole.ADMIN.value:
        return True
    return Capability.MANAGE_SYSTEM in set(capabilities)
