"""Typed models for process workflow graphs.

A workflow is an ordered list of nodes; edges are the ids in each node's
next_nodes. Graphs may contain cycles (rework and rejection loops).
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from procflow.domain.errors import StructuralGraphError

# Role sentinel: anyone may act on the node
ROLE_ALL = "ALL"


class NodeType(str, Enum):
    """Valid node types."""
    START = "start"
    END = "end"
    PROCESS = "process"
    EXCLUSIVE = "exclusive"
    PARALLEL = "parallel"


def new_node_id() -> str:
    """Generate a designer-style node id."""
    return f"node_{int(time.time() * 1000)}"


@dataclass
class WorkflowNode:
    """A state in the process graph."""
    id: str
    name: str
    type: NodeType
    role: str = ROLE_ALL
    next_nodes: List[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.type == NodeType.END

    @property
    def edge_targets(self) -> List[str]:
        """Declared targets, without blank entries left over from editing."""
        return [target for target in self.next_nodes if target and target.strip()]

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "WorkflowNode":
        """Create from raw dict (designer JSON)."""
        next_nodes = raw.get("nextNodes", raw.get("next_nodes")) or []
        return cls(
            id=raw["id"],
            name=raw.get("name", ""),
            type=NodeType(raw["type"]),
            role=raw.get("role") or ROLE_ALL,
            next_nodes=[str(n).strip() for n in next_nodes],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "role": self.role,
            "nextNodes": list(self.next_nodes),
        }


class Workflow:
    """An ordered collection of nodes with id lookup.

    Structural queries never silently drop an unresolvable edge: outgoing()
    raises StructuralGraphError for a dangling target.
    """

    def __init__(self, nodes: List[WorkflowNode]):
        self.nodes = list(nodes)
        self._nodes_by_id: Dict[str, WorkflowNode] = {}
        for node in self.nodes:
            self._nodes_by_id.setdefault(node.id, node)

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Workflow):
            return NotImplemented
        return self.nodes == other.nodes

    def __repr__(self) -> str:
        return f"<Workflow nodes={[n.id for n in self.nodes]}>"

    def find_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Get node by id."""
        return self._nodes_by_id.get(node_id)

    def require_node(self, node_id: str) -> WorkflowNode:
        """Get node by id or raise StructuralGraphError."""
        node = self.find_node(node_id)
        if node is None:
            raise StructuralGraphError(f"Node '{node_id}' does not exist in workflow", node_id=node_id)
        return node

    def outgoing(self, node: WorkflowNode) -> List[WorkflowNode]:
        """Resolve a node's next_nodes, in declared order."""
        targets = []
        for target_id in node.edge_targets:
            target = self.find_node(target_id)
            if target is None:
                raise StructuralGraphError(
                    f"Node '{node.id}' references non-existent node '{target_id}'",
                    node_id=node.id,
                )
            targets.append(target)
        return targets

    def start_nodes(self) -> List[WorkflowNode]:
        return [n for n in self.nodes if n.type == NodeType.START]

    def end_nodes(self) -> List[WorkflowNode]:
        return [n for n in self.nodes if n.type == NodeType.END]

    def get_start_node(self) -> WorkflowNode:
        """Get the single start node or raise StructuralGraphError."""
        starts = self.start_nodes()
        if len(starts) != 1:
            raise StructuralGraphError(f"Workflow must have exactly one start node, found {len(starts)}")
        return starts[0]

    @classmethod
    def from_list(cls, raw: List[Dict[str, Any]]) -> "Workflow":
        return cls([WorkflowNode.from_dict(n) for n in raw or []])

    def to_list(self) -> List[Dict[str, Any]]:
        return [node.to_dict() for node in self.nodes]


def find_node(workflow: Workflow, node_id: str) -> Optional[WorkflowNode]:
    """Find a node by id."""
    return workflow.find_node(node_id)


def outgoing(workflow: Workflow, node: WorkflowNode) -> List[WorkflowNode]:
    """Resolve a node's outgoing edges."""
    return workflow.outgoing(node)
