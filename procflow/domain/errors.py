"""Domain error taxonomy for the process engine."""

from typing import Dict, List, Optional


class ProcessEngineError(Exception):
    """Base class for process engine errors."""
    pass


class NotFoundError(ProcessEngineError):
    """A template or order id does not resolve."""

    resource_type = "resource"

    def __init__(self, resource_id: str):
        self.resource_id = resource_id
        super().__init__(f"{self.resource_type.title()} '{resource_id}' does not exist")


class TemplateNotFoundError(NotFoundError):
    """Process template not found."""
    resource_type = "template"


class OrderNotFoundError(NotFoundError):
    """Order not found."""
    resource_type = "order"


class StructuralGraphError(ProcessEngineError):
    """Workflow graph is broken where a transition needs to resolve it.

    Reported separately from permission and target failures so the template
    author can be pointed at the broken node.
    """

    def __init__(self, message: str, node_id: Optional[str] = None, template_id: Optional[str] = None):
        self.node_id = node_id
        self.template_id = template_id
        super().__init__(message)


class PermissionDeniedError(ProcessEngineError):
    """Actor role does not satisfy the current node's role gate."""

    def __init__(self, node_id: str, required_role: str, actor_role: str):
        self.node_id = node_id
        self.required_role = required_role
        self.actor_role = actor_role
        super().__init__(
            f"Role '{actor_role}' may not act on node '{node_id}' (requires '{required_role}')"
        )


class IllegalTransitionError(ProcessEngineError):
    """Requested target is not a legal target of the current node."""

    def __init__(self, current_node_id: str, target_node_id: str, legal_targets: Optional[List[str]] = None):
        self.current_node_id = current_node_id
        self.target_node_id = target_node_id
        self.legal_targets = legal_targets or []
        super().__init__(
            f"Cannot move from '{current_node_id}' to '{target_node_id}'"
        )


class FormValidationError(ProcessEngineError):
    """One or more form fields failed validation.

    Carries every failing field, keyed by label.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(f"{len(self.errors)} field(s) failed validation: {', '.join(self.errors)}")


class UploadFailure(ProcessEngineError):
    """Upload collaborator failed to store a file."""
    pass


class ConcurrentModificationError(ProcessEngineError):
    """Record changed since it was read."""

    def __init__(self, resource_id: str, expected_version: int, actual_version: int):
        self.resource_id = resource_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"'{resource_id}' was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
