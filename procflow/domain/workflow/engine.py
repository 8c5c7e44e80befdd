"""Workflow execution engine.

Drives one order's current_node_id through its template's workflow graph.

INVARIANTS:
- transition() is the only sanctioned way current_node_id/status change
- status always equals the name of the node at current_node_id
- Decisions are computed from the current node's outgoing edges only; no
  visited-state is tracked, so cycles (rework loops) are legal
- The engine refuses to guess: permission, target and structural failures
  raise, they are never downgraded to a default move
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from procflow.domain.errors import (
    IllegalTransitionError,
    PermissionDeniedError,
    StructuralGraphError,
)
from procflow.domain.orders.models import OrderInstance, utcnow
from procflow.domain.roles import Capability, is_administrator
from procflow.domain.workflow.models import ROLE_ALL, NodeType, Workflow, WorkflowNode

logger = logging.getLogger(__name__)


def can_act(node: WorkflowNode, actor_role: str, capabilities: Iterable[Capability] = ()) -> bool:
    """True if the actor may move an order off this node.

    Administrators bypass every node-level role gate. Start nodes carry no
    gate: anyone may create an instance.
    """
    if node.type == NodeType.START:
        return True
    if node.role == ROLE_ALL or str(actor_role) == node.role:
        return True
    return is_administrator(actor_role, capabilities)


def legal_targets(workflow: Workflow, node: WorkflowNode) -> List[WorkflowNode]:
    """Selectable targets from a node, in declared order.

    An exclusive gateway among the targets is replaced by its own targets
    (one level only). End nodes have no targets.
    """
    if node.is_terminal:
        return []

    targets: List[WorkflowNode] = []
    for target in workflow.outgoing(node):
        if target.type == NodeType.EXCLUSIVE:
            targets.extend(workflow.outgoing(target))
        else:
            targets.append(target)
    return targets


class WorkflowEngine:
    """State machine over a single workflow graph.

    Holds no per-order state; every call is evaluated from its arguments.
    """

    def __init__(self, workflow: Workflow, template_id: Optional[str] = None):
        self.workflow = workflow
        self.template_id = template_id

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def node(self, node_id: str) -> WorkflowNode:
        try:
            return self.workflow.require_node(node_id)
        except StructuralGraphError as e:
            e.template_id = self.template_id
            raise

    def can_act(self, node_id: str, actor_role: str, capabilities: Iterable[Capability] = ()) -> bool:
        return can_act(self.node(node_id), actor_role, capabilities)

    def legal_targets(self, node_id: str) -> List[WorkflowNode]:
        try:
            return legal_targets(self.workflow, self.node(node_id))
        except StructuralGraphError as e:
            e.template_id = self.template_id
            raise

    def is_terminal(self, node_id: str) -> bool:
        return self.node(node_id).is_terminal

    def resolve_initial_node(self, advance_past_start: bool = True) -> WorkflowNode:
        """Pick the node a new order starts on.

        With advance_past_start, the start node's first outgoing target is
        used, unless it is an exclusive gateway (no branch is chosen on the
        caller's behalf) or start has no edges yet. Otherwise the order
        begins on the start node.
        """
        try:
            start = self.workflow.get_start_node()
            if not advance_past_start:
                return start
            targets = self.workflow.outgoing(start)
        except StructuralGraphError as e:
            e.template_id = self.template_id
            raise

        if not targets or targets[0].type == NodeType.EXCLUSIVE:
            return start
        return targets[0]

    # -------------------------------------------------------------------------
    # Transition
    # -------------------------------------------------------------------------

    def check_transition(
        self,
        current_node_id: str,
        target_node_id: str,
        actor_role: str,
        capabilities: Iterable[Capability] = (),
    ) -> WorkflowNode:
        """Validate a move and return the target node.

        Raises:
            StructuralGraphError: current node or an edge does not resolve
            PermissionDeniedError: actor fails the current node's role gate
            IllegalTransitionError: target is not a legal target
        """
        current = self.node(current_node_id)

        if not can_act(current, actor_role, capabilities):
            logger.warning(
                f"Transition refused: role {actor_role} cannot act on node "
                f"{current.id} (requires {current.role})"
            )
            raise PermissionDeniedError(current.id, current.role, str(actor_role))

        targets = self.legal_targets(current.id)
        for target in targets:
            if target.id == target_node_id:
                return target

        logger.warning(
            f"Transition refused: {target_node_id} is not a legal target of {current.id}"
        )
        raise IllegalTransitionError(
            current.id,
            target_node_id,
            legal_targets=[t.id for t in targets],
        )

    def transition(
        self,
        instance: OrderInstance,
        target_node_id: str,
        actor_role: str,
        capabilities: Iterable[Capability] = (),
        now: Optional[datetime] = None,
    ) -> OrderInstance:
        """Move an order to target_node_id.

        Returns a new OrderInstance; the input is not mutated. No side effects
        beyond the returned value: notifications are the caller's concern.
        """
        if instance.current_node_id is None:
            raise StructuralGraphError(
                f"Order '{instance.id}' has no current node",
                template_id=self.template_id,
            )

        target = self.check_transition(
            instance.current_node_id,
            target_node_id,
            actor_role,
            capabilities,
        )

        logger.info(
            f"Order {instance.id}: {instance.current_node_id} -> {target.id} "
            f"({target.name}) by {actor_role}"
        )
        return replace(
            instance,
            current_node_id=target.id,
            status=target.name,
            updated_at=now or utcnow(),
        )


def resolve_initial_node(workflow: Workflow, advance_past_start: bool = True) -> WorkflowNode:
    """Pick the node a new order starts on."""
    return WorkflowEngine(workflow).resolve_initial_node(advance_past_start)


def transition(
    workflow: Workflow,
    instance: OrderInstance,
    target_node_id: str,
    actor_role: str,
    capabilities: Iterable[Capability] = (),
) -> OrderInstance:
    """Move an order to target_node_id."""
    return WorkflowEngine(workflow, instance.template_id).transition(
        instance, target_node_id, actor_role, capabilities
    )
