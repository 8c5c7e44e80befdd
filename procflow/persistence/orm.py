"""SQLAlchemy ORM models for process templates and orders.

Separate from the domain dataclasses. Schema and workflow arrays are stored
as whole JSON documents, never deep-merged.
"""

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ProcessTemplateORM(Base):
    """Process template table."""
    __tablename__ = "process_templates"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    target_module = Column(String(32), nullable=False, default="service", index=True)
    form_schema = Column(JSON, nullable=False, default=list)
    workflow = Column(JSON, nullable=False, default=list)
    revision = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class OrderORM(Base):
    """Order instance table."""
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    order_number = Column(String(64), nullable=False, default="")
    template_id = Column(String(64), nullable=True)
    template_revision = Column(Integer, nullable=True)
    module = Column(String(32), nullable=True)
    current_node_id = Column(String(128), nullable=True)
    status = Column(String(255), nullable=False, default="")
    dynamic_data = Column(JSON, nullable=False, default=dict)
    assigned_to = Column(String(128), nullable=True)
    machine_sn = Column(String(128), nullable=False, default="")
    customer_name = Column(String(255), nullable=False, default="")
    fault_description = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_orders_template", "template_id"),
        Index("idx_orders_module_status", "module", "status"),
        Index("idx_orders_machine_sn", "machine_sn"),
    )
