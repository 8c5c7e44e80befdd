"""Structural validator for workflow graphs.

Errors break the graph invariants the engine depends on. Warnings describe
states that are normal mid-edit (unreachable nodes, nodes without edges yet)
or behavior authors may not expect (chained exclusive gateways).
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Set

from procflow.domain.workflow.models import NodeType, Workflow


class GraphErrorCode(str, Enum):
    """Error codes for graph validation."""
    # Errors
    DUPLICATE_NODE_ID = "DUPLICATE_NODE_ID"
    NO_START_NODE = "NO_START_NODE"
    MULTIPLE_START_NODES = "MULTIPLE_START_NODES"
    NO_END_NODE = "NO_END_NODE"
    END_NODE_HAS_OUTGOING = "END_NODE_HAS_OUTGOING"
    EDGE_TARGET_NOT_FOUND = "EDGE_TARGET_NOT_FOUND"

    # Warnings
    UNREACHABLE_NODE = "UNREACHABLE_NODE"
    NO_OUTBOUND_EDGES = "NO_OUTBOUND_EDGES"
    BLANK_EDGE = "BLANK_EDGE"
    CHAINED_EXCLUSIVE_GATEWAY = "CHAINED_EXCLUSIVE_GATEWAY"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class GraphIssue:
    """A single structural finding."""
    code: GraphErrorCode
    message: str
    severity: Severity = Severity.ERROR
    node_id: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        where = f" ({self.node_id})" if self.node_id else ""
        return f"[{self.code.value}]{where} {self.message}"


@dataclass
class GraphValidationResult:
    """Result of graph validation."""
    valid: bool
    errors: List[GraphIssue] = field(default_factory=list)
    warnings: List[GraphIssue] = field(default_factory=list)

    @property
    def issues(self) -> List[GraphIssue]:
        return self.errors + self.warnings


class GraphValidator:
    """Validates workflow graph structure.

    Validation Rules:
    1. Node ids are unique
    2. Exactly one start node
    3. At least one end node; end nodes have no outgoing edges
    4. Every edge target exists
    5. Every node is reachable from start (warning)
    """

    def validate(self, workflow: Workflow) -> GraphValidationResult:
        errors: List[GraphIssue] = []
        warnings: List[GraphIssue] = []

        self._validate_identity(workflow, errors)
        self._validate_entry_and_exit(workflow, errors)
        self._validate_edges(workflow, errors, warnings)
        self._validate_reachability(workflow, warnings)

        return GraphValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _validate_identity(self, workflow: Workflow, errors: List[GraphIssue]) -> None:
        seen: Set[str] = set()
        for node in workflow:
            if node.id in seen:
                errors.append(GraphIssue(
                    code=GraphErrorCode.DUPLICATE_NODE_ID,
                    message=f"Duplicate node id: {node.id}",
                    node_id=node.id,
                ))
            seen.add(node.id)

    def _validate_entry_and_exit(self, workflow: Workflow, errors: List[GraphIssue]) -> None:
        starts = workflow.start_nodes()
        if not starts:
            errors.append(GraphIssue(
                code=GraphErrorCode.NO_START_NODE,
                message="Workflow has no start node",
            ))
        elif len(starts) > 1:
            errors.append(GraphIssue(
                code=GraphErrorCode.MULTIPLE_START_NODES,
                message=f"Workflow has {len(starts)} start nodes, expected exactly one",
                context={"node_ids": [n.id for n in starts]},
            ))

        ends = workflow.end_nodes()
        if not ends:
            errors.append(GraphIssue(
                code=GraphErrorCode.NO_END_NODE,
                message="Workflow has no end node",
            ))
        for end in ends:
            if end.edge_targets:
                errors.append(GraphIssue(
                    code=GraphErrorCode.END_NODE_HAS_OUTGOING,
                    message=f"End node '{end.id}' must not have outgoing edges",
                    node_id=end.id,
                    context={"next_nodes": end.edge_targets},
                ))

    def _validate_edges(
        self,
        workflow: Workflow,
        errors: List[GraphIssue],
        warnings: List[GraphIssue],
    ) -> None:
        for node in workflow:
            if len(node.edge_targets) != len(node.next_nodes):
                warnings.append(GraphIssue(
                    code=GraphErrorCode.BLANK_EDGE,
                    message=f"Node '{node.id}' has blank edge entries",
                    severity=Severity.WARNING,
                    node_id=node.id,
                ))

            if node.type != NodeType.END and not node.edge_targets:
                warnings.append(GraphIssue(
                    code=GraphErrorCode.NO_OUTBOUND_EDGES,
                    message=f"Node '{node.id}' has no outgoing edges yet",
                    severity=Severity.WARNING,
                    node_id=node.id,
                ))

            for target_id in node.edge_targets:
                target = workflow.find_node(target_id)
                if target is None:
                    errors.append(GraphIssue(
                        code=GraphErrorCode.EDGE_TARGET_NOT_FOUND,
                        message=f"Node '{node.id}' references non-existent node: {target_id}",
                        node_id=node.id,
                        context={"target_id": target_id},
                    ))
                elif node.type == NodeType.EXCLUSIVE and target.type == NodeType.EXCLUSIVE:
                    warnings.append(GraphIssue(
                        code=GraphErrorCode.CHAINED_EXCLUSIVE_GATEWAY,
                        message=(
                            f"Exclusive gateway '{node.id}' feeds exclusive gateway "
                            f"'{target_id}'; only one level is flattened into choices"
                        ),
                        severity=Severity.WARNING,
                        node_id=node.id,
                    ))

    def _validate_reachability(self, workflow: Workflow, warnings: List[GraphIssue]) -> None:
        starts = workflow.start_nodes()
        if not starts:
            return
        reachable = self._find_reachable_nodes(workflow, [n.id for n in starts])
        for node in workflow:
            if node.id not in reachable:
                warnings.append(GraphIssue(
                    code=GraphErrorCode.UNREACHABLE_NODE,
                    message=f"Node '{node.id}' is unreachable from start",
                    severity=Severity.WARNING,
                    node_id=node.id,
                ))

    def _find_reachable_nodes(self, workflow: Workflow, entry_ids: List[str]) -> Set[str]:
        """BFS over resolvable edges; cycles are fine."""
        reachable: Set[str] = set(entry_ids)
        queue = deque(entry_ids)
        while queue:
            current = workflow.find_node(queue.popleft())
            if current is None:
                continue
            for neighbor in current.edge_targets:
                if neighbor not in reachable and workflow.find_node(neighbor) is not None:
                    reachable.add(neighbor)
                    queue.append(neighbor)
        return reachable


def validate_graph(workflow: Workflow) -> List[GraphIssue]:
    """Return every structural finding, errors first."""
    return GraphValidator().validate(workflow).issues
