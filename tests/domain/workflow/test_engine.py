"""Tests for the workflow execution engine."""

from datetime import datetime, timezone

import pytest

from procflow.domain.errors import (
    IllegalTransitionError,
    PermissionDeniedError,
    StructuralGraphError,
)
from procflow.domain.orders.models import OrderInstance
from procflow.domain.roles import Capability, UserRole
from procflow.domain.templates.defaults import default_workflow
from procflow.domain.workflow.engine import (
    WorkflowEngine,
    can_act,
    legal_targets,
    resolve_initial_node,
    transition,
)
from procflow.domain.workflow.models import NodeType, Workflow, WorkflowNode


def node(node_id, node_type=NodeType.PROCESS, next_nodes=None, role="ALL"):
    return WorkflowNode(id=node_id, name=f"{node_id}-name", type=node_type,
                        role=role, next_nodes=list(next_nodes or []))


@pytest.fixture
def engine():
    return WorkflowEngine(default_workflow(), template_id="tpl_repair")


@pytest.fixture
def order():
    return OrderInstance(id="o1", template_id="tpl_repair", current_node_id="approval", status="经理审批")


class TestCanAct:
    """Tests for node role gates."""

    def test_role_all_admits_anyone(self):
        assert can_act(node("a"), UserRole.PRODUCTION.value) is True

    def test_matching_role(self):
        assert can_act(node("a", role="MANAGER"), "MANAGER") is True
        assert can_act(node("a", role="MANAGER"), "TECHNICIAN") is False

    def test_admin_bypasses_gate(self):
        assert can_act(node("a", role="MANAGER"), "ADMIN") is True

    def test_manage_system_capability_bypasses_gate(self):
        assert can_act(node("a", role="MANAGER"), "TECHNICIAN", {Capability.MANAGE_SYSTEM}) is True

    def test_start_node_has_no_gate(self):
        assert can_act(node("s", NodeType.START, role="MANAGER"), "TECHNICIAN") is True


class TestLegalTargets:
    """Tests for decision computation."""

    def test_exclusive_gateway_is_flattened(self):
        workflow = default_workflow()
        targets = legal_targets(workflow, workflow.find_node("approval"))
        assert [t.id for t in targets] == ["process_repair", "process_replace"]

    def test_plain_targets_in_declared_order(self):
        workflow = Workflow([node("a", next_nodes=["c", "b"]), node("b"), node("c")])
        assert [t.id for t in legal_targets(workflow, workflow.find_node("a"))] == ["c", "b"]

    def test_flattening_is_single_level(self):
        workflow = Workflow([
            node("a", next_nodes=["g1"]),
            node("g1", NodeType.EXCLUSIVE, ["g2", "x"]),
            node("g2", NodeType.EXCLUSIVE, ["y"]),
            node("x"),
            node("y"),
        ])
        assert [t.id for t in legal_targets(workflow, workflow.find_node("a"))] == ["g2", "x"]

    def test_end_node_has_no_targets(self):
        workflow = default_workflow()
        assert legal_targets(workflow, workflow.find_node("end")) == []

    def test_dangling_target_raises(self):
        workflow = Workflow([node("a", next_nodes=["ghost"])])
        with pytest.raises(StructuralGraphError):
            legal_targets(workflow, workflow.find_node("a"))

    def test_dangling_target_behind_gateway_raises(self):
        workflow = Workflow([node("a", next_nodes=["g"]), node("g", NodeType.EXCLUSIVE, ["ghost"])])
        with pytest.raises(StructuralGraphError):
            legal_targets(workflow, workflow.find_node("a"))

    def test_engine_attaches_template_id(self):
        engine = WorkflowEngine(Workflow([node("a", next_nodes=["ghost"])]), template_id="tpl_x")
        with pytest.raises(StructuralGraphError) as exc_info:
            engine.legal_targets("a")
        assert exc_info.value.template_id == "tpl_x"


class TestResolveInitialNode:
    """Tests for initial node selection."""

    def test_advances_to_first_target(self):
        initial = resolve_initial_node(default_workflow())
        assert initial.id == "approval"
        assert initial.name == "经理审批"

    def test_stays_on_start_when_disabled(self):
        assert resolve_initial_node(default_workflow(), advance_past_start=False).id == "start"

    def test_stays_on_start_before_gateway(self):
        workflow = Workflow([
            node("s", NodeType.START, ["g"]),
            node("g", NodeType.EXCLUSIVE, ["a", "b"]),
            node("a"),
            node("b"),
        ])
        assert resolve_initial_node(workflow).id == "s"

    def test_stays_on_start_without_edges(self):
        workflow = Workflow([node("s", NodeType.START)])
        assert resolve_initial_node(workflow).id == "s"

    def test_requires_a_start_node(self):
        with pytest.raises(StructuralGraphError):
            resolve_initial_node(Workflow([node("a")]))


class TestTransition:
    """Tests for the transition operation."""

    def test_manager_approval_then_technician(self, engine, order):
        assert [t.id for t in engine.legal_targets("approval")] == ["process_repair", "process_replace"]

        moved = engine.transition(order, "process_repair", "MANAGER")
        assert moved.current_node_id == "process_repair"
        assert moved.status == "维修处理"

        done = engine.transition(moved, "end", "TECHNICIAN")
        assert done.status == "结束"
        assert engine.is_terminal(done.current_node_id) is True

    def test_input_not_mutated(self, engine, order):
        engine.transition(order, "process_replace", "MANAGER")
        assert order.current_node_id == "approval"
        assert order.status == "经理审批"

    def test_sets_updated_at(self, engine, order):
        now = datetime(2026, 1, 2, tzinfo=timezone.utc)
        assert engine.transition(order, "process_repair", "MANAGER", now=now).updated_at == now

    def test_wrong_role_denied(self, engine, order):
        with pytest.raises(PermissionDeniedError) as exc_info:
            engine.transition(order, "process_repair", "TECHNICIAN")
        assert exc_info.value.required_role == "MANAGER"
        assert exc_info.value.node_id == "approval"

    def test_permission_checked_before_target(self, engine, order):
        with pytest.raises(PermissionDeniedError):
            engine.transition(order, "nowhere", "TECHNICIAN")

    def test_admin_may_act_anywhere(self, engine, order):
        assert engine.transition(order, "process_replace", "ADMIN").current_node_id == "process_replace"

    def test_illegal_target(self, engine, order):
        with pytest.raises(IllegalTransitionError) as exc_info:
            engine.transition(order, "end", "MANAGER")
        assert exc_info.value.legal_targets == ["process_repair", "process_replace"]

    def test_gateway_itself_is_not_a_target(self, engine, order):
        with pytest.raises(IllegalTransitionError):
            engine.transition(order, "exclusive_gate", "MANAGER")

    def test_no_transition_out_of_end(self, engine):
        closed = OrderInstance(id="o2", template_id="tpl_repair", current_node_id="end", status="结束")
        with pytest.raises(IllegalTransitionError) as exc_info:
            engine.transition(closed, "start", "ADMIN")
        assert exc_info.value.legal_targets == []

    def test_unknown_current_node(self, engine):
        broken = OrderInstance(id="o3", template_id="tpl_repair", current_node_id="deleted")
        with pytest.raises(StructuralGraphError):
            engine.transition(broken, "end", "ADMIN")

    def test_missing_current_node(self, engine):
        with pytest.raises(StructuralGraphError):
            engine.transition(OrderInstance(id="o4", template_id="tpl_repair"), "end", "ADMIN")

    def test_cycles_can_be_traversed_repeatedly(self):
        workflow = Workflow([
            node("s", NodeType.START, ["work"]),
            node("work", next_nodes=["review"]),
            node("review", next_nodes=["work", "e"]),
            node("e", NodeType.END),
        ])
        order = OrderInstance(id="o5", current_node_id="work", status="work-name")
        for _ in range(3):
            order = transition(workflow, order, "review", "TECHNICIAN")
            order = transition(workflow, order, "work", "TECHNICIAN")
        assert order.current_node_id == "work"
        assert transition(workflow, order, "review", "TECHNICIAN").status == "review-name"

    def test_same_inputs_same_result(self, engine, order):
        first = engine.transition(order, "process_repair", "MANAGER", now=order.updated_at)
        second = engine.transition(order, "process_repair", "MANAGER", now=order.updated_at)
        assert first == second
