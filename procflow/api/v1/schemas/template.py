"""Template-related API schemas.

Field names follow the designer's JSON (formSchema, targetModule, nextNodes);
snake_case names are accepted on input as well.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from procflow.domain.templates.models import ProcessTemplate
from procflow.domain.templates.validator import TemplateValidationResult
from procflow.domain.workflow.models import WorkflowNode


class FormFieldSchema(BaseModel):
    """One form field definition."""

    id: str
    label: str = ""
    type: str
    required: bool = False
    width: str = "full"
    options: List[str] = Field(default_factory=list)
    placeholder: Optional[str] = None
    description: Optional[str] = None


class WorkflowNodeSchema(BaseModel):
    """One workflow node."""

    id: str
    name: str = ""
    type: str
    role: str = "ALL"
    next_nodes: List[str] = Field(default_factory=list, alias="nextNodes")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_node(cls, node: WorkflowNode) -> "WorkflowNodeSchema":
        return cls.model_validate(node.to_dict())


class TemplatePayload(BaseModel):
    """Template as submitted by the designer."""

    id: Optional[str] = None
    name: str = ""
    description: str = ""
    target_module: str = Field("service", alias="targetModule")
    form_schema: List[FormFieldSchema] = Field(default_factory=list, alias="formSchema")
    workflow: List[WorkflowNodeSchema] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def to_raw(self) -> Dict[str, Any]:
        """Designer JSON for the domain layer."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TemplateResponse(TemplatePayload):
    """Stored template."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    revision: int = 0

    @classmethod
    def from_template(cls, template: ProcessTemplate) -> "TemplateResponse":
        return cls.model_validate(template.to_dict())


class TemplateListResponse(BaseModel):
    templates: List[TemplateResponse]
    total: int


class TemplateIssueResponse(BaseModel):
    code: str
    message: str
    path: str = ""
    node_id: Optional[str] = None


class TemplateValidationResponse(BaseModel):
    """Advisory authoring findings."""

    valid: bool
    errors: List[TemplateIssueResponse] = Field(default_factory=list)
    warnings: List[TemplateIssueResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: TemplateValidationResult) -> "TemplateValidationResponse":
        return cls(
            valid=result.valid,
            errors=[TemplateIssueResponse(**e.to_dict()) for e in result.errors],
            warnings=[TemplateIssueResponse(**w.to_dict()) for w in result.warnings],
        )


class TemplateSaveResponse(BaseModel):
    template: TemplateResponse
    validation: TemplateValidationResponse


class LegalTargetsResponse(BaseModel):
    """Actions available from a node."""

    template_id: str
    node_id: str
    targets: List[WorkflowNodeSchema]


class FormDataValidationRequest(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)


class FormDataValidationResponse(BaseModel):
    """Required-field errors keyed by field label."""

    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)
