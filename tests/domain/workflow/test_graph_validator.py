"""Tests for workflow graph structural validation."""

import pytest

from procflow.domain.templates.defaults import default_workflow
from procflow.domain.workflow.models import NodeType, Workflow, WorkflowNode
from procflow.domain.workflow.validator import (
    GraphErrorCode,
    GraphValidator,
    Severity,
    validate_graph,
)


def node(node_id, node_type=NodeType.PROCESS, next_nodes=None):
    return WorkflowNode(id=node_id, name=node_id, type=node_type, next_nodes=list(next_nodes or []))


def codes(issues):
    return [issue.code for issue in issues]


@pytest.fixture
def validator():
    return GraphValidator()


class TestGraphValidator:
    """Tests for GraphValidator."""

    def test_default_workflow_is_clean(self, validator):
        result = validator.validate(default_workflow())
        assert result.valid is True
        assert result.issues == []

    def test_no_start_node(self, validator):
        result = validator.validate(Workflow([node("a", next_nodes=["e"]), node("e", NodeType.END)]))
        assert result.valid is False
        assert GraphErrorCode.NO_START_NODE in codes(result.errors)

    def test_multiple_start_nodes(self, validator):
        result = validator.validate(Workflow([
            node("s1", NodeType.START, ["e"]),
            node("s2", NodeType.START, ["e"]),
            node("e", NodeType.END),
        ]))
        assert codes(result.errors) == [GraphErrorCode.MULTIPLE_START_NODES]
        assert result.errors[0].context["node_ids"] == ["s1", "s2"]

    def test_no_end_node(self, validator):
        result = validator.validate(Workflow([node("s", NodeType.START, ["a"]), node("a", next_nodes=["s"])]))
        assert GraphErrorCode.NO_END_NODE in codes(result.errors)

    def test_end_node_with_outgoing_edges(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["e"]),
            node("e", NodeType.END, ["s"]),
        ]))
        assert codes(result.errors) == [GraphErrorCode.END_NODE_HAS_OUTGOING]
        assert result.errors[0].node_id == "e"

    def test_dangling_edge(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["ghost"]),
            node("e", NodeType.END),
        ]))
        assert GraphErrorCode.EDGE_TARGET_NOT_FOUND in codes(result.errors)

    def test_duplicate_node_ids(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["e"]),
            node("e", NodeType.END),
            node("e", NodeType.END),
        ]))
        assert GraphErrorCode.DUPLICATE_NODE_ID in codes(result.errors)

    def test_unreachable_node_is_a_warning(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["e"]),
            node("orphan", next_nodes=["e"]),
            node("e", NodeType.END),
        ]))
        assert result.valid is True
        assert codes(result.warnings) == [GraphErrorCode.UNREACHABLE_NODE]
        assert result.warnings[0].severity == Severity.WARNING

    def test_cycles_are_valid(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["work"]),
            node("work", next_nodes=["review"]),
            node("review", next_nodes=["work", "e"]),
            node("e", NodeType.END),
        ]))
        assert result.valid is True
        assert result.warnings == []

    def test_node_without_edges_warns(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["a", "e"]),
            node("a"),
            node("e", NodeType.END),
        ]))
        assert result.valid is True
        assert codes(result.warnings) == [GraphErrorCode.NO_OUTBOUND_EDGES]

    def test_chained_exclusive_gateways_warn(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["g1"]),
            node("g1", NodeType.EXCLUSIVE, ["g2"]),
            node("g2", NodeType.EXCLUSIVE, ["e"]),
            node("e", NodeType.END),
        ]))
        assert result.valid is True
        assert GraphErrorCode.CHAINED_EXCLUSIVE_GATEWAY in codes(result.warnings)

    def test_blank_edge_warns(self, validator):
        result = validator.validate(Workflow([
            node("s", NodeType.START, ["e", ""]),
            node("e", NodeType.END),
        ]))
        assert codes(result.warnings) == [GraphErrorCode.BLANK_EDGE]

    def test_validate_graph_lists_errors_first(self):
        issues = validate_graph(Workflow([
            node("s", NodeType.START, ["e"]),
            node("orphan", next_nodes=["e"]),
        ]))
        assert issues[0].severity == Severity.ERROR
        assert issues[-1].severity == Severity.WARNING
