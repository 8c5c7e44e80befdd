"""Order lifecycle service.

Glues the template store, order persistence, execution engine, form
renderer and collaborators into the caller-facing operations. Every
operation re-fetches the template and order it acts on, computes the result
in memory, and persists it with a single version-checked write.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from procflow.domain.errors import FormValidationError, StructuralGraphError
from procflow.domain.forms.models import StorageKey, find_field, migrate_data_keys
from procflow.domain.forms.renderer import DisplayField, FormRenderer, UploadOutcome
from procflow.domain.forms.validator import validate
from procflow.domain.orders.models import (
    INTERNAL_CUSTOMER,
    OrderInstance,
    generate_order_number,
)
from procflow.domain.roles import Capability
from procflow.domain.templates.models import ProcessTemplate, TargetModule
from procflow.domain.workflow.engine import WorkflowEngine
from procflow.domain.workflow.models import WorkflowNode
from procflow.integrations.notifications import NotificationEvent, Notifier, notify_safely
from procflow.integrations.uploads import UploadStore
from procflow.persistence.repositories import OrderFilter, OrderRepository, TemplateStore

logger = logging.getLogger(__name__)

# Labels used when reporting missing order header fields
MACHINE_SN_LABEL = "机器序列号"
CUSTOMER_NAME_LABEL = "客户名称"
UNKNOWN_FIELD_MESSAGE = "unknown field"


@dataclass
class OrderServiceConfig:
    """Behavior switches, normally taken from Settings."""
    advance_past_start: bool = True
    storage_mode: StorageKey = StorageKey.ID
    upload_url_prefix: str = "/data"
    default_assignee_id: Optional[str] = None


class OrderService:
    """Caller-facing order operations."""

    def __init__(
        self,
        templates: TemplateStore,
        orders: OrderRepository,
        notifier: Optional[Notifier] = None,
        uploads: Optional[UploadStore] = None,
        config: Optional[OrderServiceConfig] = None,
    ):
        self.templates = templates
        self.orders = orders
        self.notifier = notifier
        self.uploads = uploads
        self.config = config or OrderServiceConfig()

    def renderer_for(self, template: ProcessTemplate) -> FormRenderer:
        return FormRenderer(
            template.form_schema,
            mode=self.config.storage_mode,
            upload_url_prefix=self.config.upload_url_prefix,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def list_orders(self, order_filter: Optional[OrderFilter] = None) -> List[OrderInstance]:
        return await self.orders.list_orders(order_filter)

    async def get_order(self, order_id: str) -> OrderInstance:
        return await self.orders.get_order(order_id)

    async def get_legal_targets(self, template_id: str, current_node_id: str) -> List[WorkflowNode]:
        """Targets an actor may choose from a node, for rendering actions."""
        template = await self.templates.get_template(template_id)
        return WorkflowEngine(template.workflow, template.id).legal_targets(current_node_id)

    async def validate_form_data(self, template_id: str, data: Dict[str, Any]) -> Dict[str, str]:
        """Required-field errors keyed by label; empty when valid."""
        template = await self.templates.get_template(template_id)
        return validate(template.form_schema, data, self.config.storage_mode)

    async def project_order(self, order_id: str) -> Tuple[OrderInstance, List[DisplayField]]:
        """Order plus the read-only projection of its form data."""
        order = await self.orders.get_order(order_id)
        if order.template_id is None:
            return order, []
        template = await self.templates.get_template(order.template_id)
        return order, self.renderer_for(template).project(order.dynamic_data)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def create_order(
        self,
        template_id: str,
        machine_sn: str,
        dynamic_data: Optional[Dict[str, Any]] = None,
        customer_name: Optional[str] = None,
        fault_description: Optional[str] = None,
        assigned_to: Optional[str] = None,
    ) -> OrderInstance:
        """Create an order from a template's creation form.

        Raises:
            TemplateNotFoundError: template does not exist
            FormValidationError: every missing or unknown field at once
            StructuralGraphError: the template has no usable start node
        """
        template = await self.templates.get_template(template_id)
        renderer = self.renderer_for(template)

        errors: Dict[str, str] = {}
        if not (machine_sn or "").strip():
            errors[MACHINE_SN_LABEL] = "required"
        if template.target_module == TargetModule.SERVICE and not (customer_name or "").strip():
            errors[CUSTOMER_NAME_LABEL] = "required"

        data, unknown = self._normalize(renderer, {}, dynamic_data or {})
        errors.update(unknown)
        errors.update(validate(template.form_schema, data, self.config.storage_mode))
        if errors:
            raise FormValidationError(errors)

        engine = WorkflowEngine(template.workflow, template.id)
        initial = engine.resolve_initial_node(self.config.advance_past_start)

        if template.target_module == TargetModule.PRODUCTION and not customer_name:
            customer_name = INTERNAL_CUSTOMER

        order = OrderInstance(
            template_id=template.id,
            template_revision=template.revision,
            module=template.target_module,
            order_number=generate_order_number(template.target_module),
            current_node_id=initial.id,
            status=initial.name,
            dynamic_data=data,
            assigned_to=assigned_to or self.config.default_assignee_id,
            machine_sn=machine_sn.strip(),
            customer_name=customer_name or "",
            fault_description=fault_description or template.name,
        )
        created = await self.orders.create_order(order)
        logger.info(
            f"Created order {created.id} ({created.order_number}) from template "
            f"{template.id} at node {initial.id}"
        )

        await notify_safely(self.notifier, NotificationEvent.ORDER_CREATED, created, created.assigned_to)
        return created

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def attempt_transition(
        self,
        order_id: str,
        target_node_id: str,
        actor_role: str,
        capabilities: Iterable[Capability] = (),
    ) -> OrderInstance:
        """Move an order along its workflow.

        Raises:
            OrderNotFoundError / TemplateNotFoundError
            PermissionDeniedError: actor fails the current node's gate
            IllegalTransitionError: target is not a legal target
            StructuralGraphError: the graph cannot be resolved
            ConcurrentModificationError: the order changed since it was read
        """
        order = await self.orders.get_order(order_id)
        if order.template_id is None:
            raise StructuralGraphError(f"Order '{order_id}' is not bound to a process template")

        template = await self.templates.get_template(order.template_id)
        if order.template_revision is not None and order.template_revision != template.revision:
            logger.warning(
                f"Order {order_id} was created against template {template.id} "
                f"revision {order.template_revision}, now at {template.revision}"
            )

        engine = WorkflowEngine(template.workflow, template.id)
        moved = engine.transition(order, target_node_id, actor_role, capabilities)

        updated = await self.orders.update_order(
            order_id,
            {"current_node_id": moved.current_node_id, "status": moved.status},
            expected_version=order.version,
        )

        if engine.is_terminal(updated.current_node_id):
            await notify_safely(self.notifier, NotificationEvent.ORDER_CLOSED, updated, updated.assigned_to)
        return updated

    # -------------------------------------------------------------------------
    # Form data
    # -------------------------------------------------------------------------

    def _normalize(
        self,
        renderer: FormRenderer,
        data: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> Tuple[Dict[str, Any], Dict[str, str]]:
        """Apply edits through the renderer.

        Returns the new bag and per-key errors. Unknown keys and values of
        the wrong shape are reported; layout keys are dropped.
        """
        rejected: Dict[str, str] = {}
        updated = data
        for key, value in changes.items():
            form_field = find_field(renderer.schema, key)
            if form_field is None:
                rejected[key] = UNKNOWN_FIELD_MESSAGE
                continue
            if form_field.is_layout:
                continue
            try:
                updated = renderer.apply_change(updated, key, value)
            except ValueError as e:
                rejected[key] = str(e)
        return updated, rejected

    async def update_dynamic_data(
        self,
        order_id: str,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> OrderInstance:
        """Merge field edits into an order's data bag.

        The bag is rewritten as a whole; stored label keys are migrated to
        the current storage key on the way.
        """
        order = await self.orders.get_order(order_id)
        if order.template_id is None:
            raise StructuralGraphError(f"Order '{order_id}' is not bound to a process template")
        template = await self.templates.get_template(order.template_id)
        renderer = self.renderer_for(template)

        current = order.dynamic_data
        if self.config.storage_mode == StorageKey.ID:
            current = migrate_data_keys(template.form_schema, current)

        data, unknown = self._normalize(renderer, current, changes)
        if unknown:
            raise FormValidationError(unknown)

        return await self.orders.update_order(
            order_id,
            {"dynamic_data": data},
            expected_version=order.version if expected_version is None else expected_version,
        )

    async def upload_field_file(
        self,
        order_id: str,
        field_key: str,
        filename: str,
        content: str,
        mime_type: Optional[str] = None,
    ) -> Tuple[OrderInstance, Optional[str]]:
        """Upload a file for a file field and store its server name.

        Returns the order and the upload error, if any. A failed upload
        leaves the order unchanged.
        """
        if self.uploads is None:
            raise RuntimeError("No upload store configured")

        order = await self.orders.get_order(order_id)
        if order.template_id is None:
            raise StructuralGraphError(f"Order '{order_id}' is not bound to a process template")
        template = await self.templates.get_template(order.template_id)
        renderer = self.renderer_for(template)

        outcome: UploadOutcome = await renderer.upload_file(
            order.dynamic_data, field_key, filename, content, mime_type, self.uploads
        )
        if not outcome.ok:
            return order, outcome.error

        updated = await self.orders.update_order(
            order_id,
            {"dynamic_data": outcome.data},
            expected_version=order.version,
        )
        return updated, None

    # -------------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------------

    async def reassign(
        self,
        order_id: str,
        assignee_id: Optional[str],
        expected_version: Optional[int] = None,
    ) -> OrderInstance:
        """Change who is expected to act. Not a workflow transition."""
        order = await self.orders.get_order(order_id)
        updated = await self.orders.update_order(
            order_id,
            {"assigned_to": assignee_id},
            expected_version=order.version if expected_version is None else expected_version,
        )
        logger.info(f"Order {order_id} assigned to {assignee_id}")

        if assignee_id:
            await notify_safely(self.notifier, NotificationEvent.ORDER_ASSIGNED, updated, assignee_id)
        return updated
