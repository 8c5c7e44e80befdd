"""Tests for workflow graph models."""

import pytest

from procflow.domain.errors import StructuralGraphError
from procflow.domain.templates.defaults import default_workflow
from procflow.domain.workflow.models import (
    ROLE_ALL,
    NodeType,
    Workflow,
    WorkflowNode,
    find_node,
    outgoing,
)


class TestWorkflowNode:
    """Tests for node parsing."""

    def test_from_dict_designer_json(self):
        node = WorkflowNode.from_dict({
            "id": "n1",
            "name": "审批",
            "type": "process",
            "role": "MANAGER",
            "nextNodes": ["n2", " n3 "],
        })

        assert node.type == NodeType.PROCESS
        assert node.next_nodes == ["n2", "n3"]

    def test_role_defaults_to_all(self):
        node = WorkflowNode.from_dict({"id": "n1", "type": "process"})
        assert node.role == ROLE_ALL
        assert node.next_nodes == []

    def test_blank_edges_excluded_from_targets(self):
        node = WorkflowNode(id="n1", name="", type=NodeType.PROCESS, next_nodes=["a", "", "  "])
        assert node.edge_targets == ["a"]

    def test_to_dict_uses_designer_keys(self):
        node = WorkflowNode(id="n1", name="x", type=NodeType.END)
        assert node.to_dict() == {"id": "n1", "name": "x", "type": "end", "role": "ALL", "nextNodes": []}

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            WorkflowNode.from_dict({"id": "n1", "type": "timer"})


class TestWorkflow:
    """Tests for graph lookups."""

    def test_find_node(self):
        workflow = default_workflow()
        assert find_node(workflow, "approval").name == "经理审批"
        assert find_node(workflow, "missing") is None

    def test_outgoing_in_declared_order(self):
        workflow = default_workflow()
        gate = workflow.find_node("exclusive_gate")
        assert [n.id for n in outgoing(workflow, gate)] == ["process_repair", "process_replace"]

    def test_outgoing_dangling_target_raises(self):
        workflow = Workflow([WorkflowNode(id="a", name="A", type=NodeType.PROCESS, next_nodes=["ghost"])])
        with pytest.raises(StructuralGraphError) as exc_info:
            workflow.outgoing(workflow.find_node("a"))
        assert exc_info.value.node_id == "a"

    def test_require_node(self):
        with pytest.raises(StructuralGraphError):
            default_workflow().require_node("ghost")

    def test_get_start_node(self):
        assert default_workflow().get_start_node().id == "start"

    def test_get_start_node_requires_exactly_one(self):
        workflow = Workflow([
            WorkflowNode(id="s1", name="", type=NodeType.START),
            WorkflowNode(id="s2", name="", type=NodeType.START),
        ])
        with pytest.raises(StructuralGraphError):
            workflow.get_start_node()

    def test_list_round_trip(self):
        workflow = default_workflow()
        assert Workflow.from_list(workflow.to_list()) == workflow
