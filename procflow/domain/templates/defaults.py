"""Starting points for the template designer."""

from typing import Optional

from procflow.domain.forms.models import (
    CHOICE_TYPES,
    FieldType,
    FieldWidth,
    FormFieldConfig,
    new_field_id,
)
from procflow.domain.roles import UserRole
from procflow.domain.templates.models import ProcessTemplate, TargetModule
from procflow.domain.workflow.models import ROLE_ALL, NodeType, Workflow, WorkflowNode, new_node_id

DEFAULT_TEMPLATE_NAME = "新建自定义流程"
DEFAULT_NODE_NAME = "新任务"
DEFAULT_FIELD_LABEL = "新控件"
DEFAULT_PLACEHOLDER = "请输入..."
DEFAULT_NOTE_TEXT = "这是一段说明文字，用于提示用户。"

_LAYOUT_LABELS = {
    FieldType.DIVIDER: "分割线",
    FieldType.NOTE: "说明文字",
}


def default_workflow() -> Workflow:
    """Approval, amount gateway, then repair or replace."""
    return Workflow([
        WorkflowNode(id="start", name="开始", type=NodeType.START, role=ROLE_ALL,
                     next_nodes=["approval"]),
        WorkflowNode(id="approval", name="经理审批", type=NodeType.PROCESS,
                     role=UserRole.MANAGER.value, next_nodes=["exclusive_gate"]),
        WorkflowNode(id="exclusive_gate", name="金额判断", type=NodeType.EXCLUSIVE, role=ROLE_ALL,
                     next_nodes=["process_repair", "process_replace"]),
        WorkflowNode(id="process_repair", name="维修处理", type=NodeType.PROCESS,
                     role=UserRole.TECHNICIAN.value, next_nodes=["end"]),
        WorkflowNode(id="process_replace", name="换货处理", type=NodeType.PROCESS,
                     role=UserRole.TECHNICIAN.value, next_nodes=["end"]),
        WorkflowNode(id="end", name="结束", type=NodeType.END, role=ROLE_ALL),
    ])


def default_template(target_module: TargetModule = TargetModule.SERVICE) -> ProcessTemplate:
    """An unsaved template the designer opens with."""
    return ProcessTemplate(
        id=None,
        name=DEFAULT_TEMPLATE_NAME,
        target_module=target_module,
        workflow=default_workflow(),
    )


def new_field(field_type: FieldType, field_id: Optional[str] = None) -> FormFieldConfig:
    """A freshly added designer field with the type's defaults."""
    return FormFieldConfig(
        id=field_id or new_field_id(),
        label=_LAYOUT_LABELS.get(field_type, DEFAULT_FIELD_LABEL),
        type=field_type,
        width=FieldWidth.FULL,
        options=["选项1", "选项2"] if field_type in CHOICE_TYPES else [],
        placeholder=DEFAULT_PLACEHOLDER,
        description=DEFAULT_NOTE_TEXT if field_type == FieldType.NOTE else None,
    )


def new_node(node_id: Optional[str] = None) -> WorkflowNode:
    """A freshly added process node with no edges yet."""
    return WorkflowNode(
        id=node_id or new_node_id(),
        name=DEFAULT_NODE_NAME,
        type=NodeType.PROCESS,
        role=ROLE_ALL,
    )
