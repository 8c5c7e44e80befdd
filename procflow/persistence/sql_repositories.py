"""SQLAlchemy repository implementations."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from procflow.domain.errors import (
    ConcurrentModificationError,
    OrderNotFoundError,
    TemplateNotFoundError,
)
from procflow.domain.forms.models import parse_schema
from procflow.domain.orders.models import OrderInstance
from procflow.domain.templates.models import ProcessTemplate, TargetModule, new_template_id
from procflow.domain.workflow.models import Workflow
from procflow.persistence.orm import OrderORM, ProcessTemplateORM
from procflow.persistence.repositories import OrderFilter, check_update_fields, new_order_id

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# Templates
# ============================================================================

def _orm_to_template(orm_tpl: ProcessTemplateORM) -> ProcessTemplate:
    """Convert ORM template to domain model."""
    return ProcessTemplate(
        id=orm_tpl.id,
        name=orm_tpl.name,
        description=orm_tpl.description or "",
        target_module=TargetModule(orm_tpl.target_module),
        form_schema=parse_schema(orm_tpl.form_schema or []),
        workflow=Workflow.from_list(orm_tpl.workflow or []),
        created_at=_as_utc(orm_tpl.created_at),
        updated_at=_as_utc(orm_tpl.updated_at),
        revision=orm_tpl.revision,
    )


def _template_to_orm(template: ProcessTemplate, orm_tpl: ProcessTemplateORM) -> ProcessTemplateORM:
    """Copy domain template content onto an ORM row."""
    orm_tpl.name = template.name
    orm_tpl.description = template.description
    orm_tpl.target_module = template.target_module.value
    orm_tpl.form_schema = [f.to_dict() for f in template.form_schema]
    orm_tpl.workflow = template.workflow.to_list()
    return orm_tpl


class SQLTemplateStore:
    """SQLAlchemy implementation of TemplateStore."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        """
        Initialize store.

        Args:
            session_factory: Callable that returns an AsyncSession
        """
        self._session_factory = session_factory

    async def list_templates(self) -> List[ProcessTemplate]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProcessTemplateORM).order_by(ProcessTemplateORM.created_at)
            )
            return [_orm_to_template(row) for row in result.scalars().all()]

    async def get_template(self, template_id: str) -> ProcessTemplate:
        async with self._session_factory() as session:
            orm_tpl = await session.get(ProcessTemplateORM, template_id)
            if orm_tpl is None:
                raise TemplateNotFoundError(template_id)
            return _orm_to_template(orm_tpl)

    async def save_template(self, template: ProcessTemplate) -> ProcessTemplate:
        now = datetime.now(timezone.utc)
        template_id = template.id or new_template_id()

        async with self._session_factory() as session:
            existing = await session.get(ProcessTemplateORM, template_id)

            if existing:
                orm_tpl = _template_to_orm(template, existing)
                orm_tpl.revision = existing.revision + 1
            else:
                orm_tpl = _template_to_orm(template, ProcessTemplateORM(id=template_id))
                orm_tpl.revision = 1
                orm_tpl.created_at = now
                session.add(orm_tpl)
            orm_tpl.updated_at = now

            await session.commit()
            await session.refresh(orm_tpl)

            logger.info(f"Saved template {template_id} (revision {orm_tpl.revision})")
            return _orm_to_template(orm_tpl)


# ============================================================================
# Orders
# ============================================================================

def _orm_to_order(orm_order: OrderORM) -> OrderInstance:
    """Convert ORM order to domain model."""
    return OrderInstance(
        id=orm_order.id,
        template_id=orm_order.template_id,
        current_node_id=orm_order.current_node_id,
        status=orm_order.status or "",
        dynamic_data=dict(orm_order.dynamic_data or {}),
        assigned_to=orm_order.assigned_to,
        order_number=orm_order.order_number or "",
        module=TargetModule(orm_order.module) if orm_order.module else None,
        machine_sn=orm_order.machine_sn or "",
        customer_name=orm_order.customer_name or "",
        fault_description=orm_order.fault_description or "",
        template_revision=orm_order.template_revision,
        version=orm_order.version,
        created_at=_as_utc(orm_order.created_at),
        updated_at=_as_utc(orm_order.updated_at),
    )


class SQLOrderRepository:
    """SQLAlchemy implementation of OrderRepository."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def list_orders(self, order_filter: Optional[OrderFilter] = None) -> List[OrderInstance]:
        order_filter = order_filter or OrderFilter()
        query = select(OrderORM)

        if order_filter.template_id is not None:
            query = query.where(OrderORM.template_id == order_filter.template_id)
        if order_filter.module is not None:
            query = query.where(OrderORM.module == order_filter.module.value)
        if order_filter.status is not None:
            query = query.where(OrderORM.status == order_filter.status)
        if order_filter.assigned_to is not None:
            query = query.where(OrderORM.assigned_to == order_filter.assigned_to)
        if order_filter.search:
            pattern = f"%{order_filter.search}%"
            query = query.where(or_(
                OrderORM.order_number.ilike(pattern),
                OrderORM.machine_sn.ilike(pattern),
                OrderORM.customer_name.ilike(pattern),
            ))

        query = query.order_by(OrderORM.created_at.desc())

        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_orm_to_order(row) for row in result.scalars().all()]

    async def get_order(self, order_id: str) -> OrderInstance:
        async with self._session_factory() as session:
            orm_order = await session.get(OrderORM, order_id)
            if orm_order is None:
                raise OrderNotFoundError(order_id)
            return _orm_to_order(orm_order)

    async def create_order(self, order: OrderInstance) -> OrderInstance:
        now = datetime.now(timezone.utc)
        orm_order = OrderORM(
            id=order.id or new_order_id(),
            order_number=order.order_number,
            template_id=order.template_id,
            template_revision=order.template_revision,
            module=order.module.value if order.module else None,
            current_node_id=order.current_node_id,
            status=order.status,
            dynamic_data=dict(order.dynamic_data),
            assigned_to=order.assigned_to,
            machine_sn=order.machine_sn,
            customer_name=order.customer_name,
            fault_description=order.fault_description,
            version=1,
            created_at=now,
            updated_at=now,
        )

        async with self._session_factory() as session:
            session.add(orm_order)
            await session.commit()
            await session.refresh(orm_order)
            return _orm_to_order(orm_order)

    async def update_order(
        self,
        order_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> OrderInstance:
        check_update_fields(fields)

        async with self._session_factory() as session:
            current = await session.get(OrderORM, order_id)
            if current is None:
                raise OrderNotFoundError(order_id)
            version = current.version if expected_version is None else expected_version

            # Compare-and-set on version so concurrent writers cannot interleave
            result = await session.execute(
                update(OrderORM)
                .where(OrderORM.id == order_id, OrderORM.version == version)
                .values(
                    **fields,
                    version=version + 1,
                    updated_at=datetime.now(timezone.utc),
                )
            )
            if result.rowcount == 0:
                await session.rollback()
                actual = await session.get(OrderORM, order_id, populate_existing=True)
                raise ConcurrentModificationError(order_id, version, actual.version if actual else -1)

            await session.commit()
            orm_order = await session.get(OrderORM, order_id, populate_existing=True)
            return _orm_to_order(orm_order)
