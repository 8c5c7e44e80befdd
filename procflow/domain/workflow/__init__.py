"""Workflow graphs: node model and structural validation.

The execution engine lives in procflow.domain.workflow.engine; it depends on
the order model and is imported from there directly.
"""

from procflow.domain.workflow.models import (
    ROLE_ALL,
    NodeType,
    Workflow,
    WorkflowNode,
    find_node,
    new_node_id,
    outgoing,
)
from procflow.domain.workflow.validator import (
    GraphErrorCode,
    GraphIssue,
    GraphValidationResult,
    GraphValidator,
    Severity,
    validate_graph,
)

__all__ = [
    "ROLE_ALL",
    "NodeType",
    "Workflow",
    "WorkflowNode",
    "find_node",
    "new_node_id",
    "outgoing",
    "GraphErrorCode",
    "GraphIssue",
    "GraphValidationResult",
    "GraphValidator",
    "Severity",
    "validate_graph",
]
