"""Authoring validation for process templates.

Combines the form schema checks and the workflow graph checks into one
advisory report for the designer. Templates may be saved while invalid
(authors work through transient states); the engine fails fast only when an
order actually needs to resolve a broken edge.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from procflow.domain.forms.validator import FormSchemaValidator
from procflow.domain.templates.models import ProcessTemplate, TargetModule
from procflow.domain.workflow.models import NodeType, Workflow
from procflow.domain.workflow.validator import GraphValidator

logger = logging.getLogger(__name__)

VALID_NODE_TYPES = {t.value for t in NodeType}
VALID_TARGET_MODULES = {m.value for m in TargetModule}


@dataclass
class TemplateIssue:
    """A single authoring finding."""
    code: str
    message: str
    path: str = ""
    node_id: Optional[str] = None

    def __str__(self) -> str:
        if self.path:
            return f"[{self.code}] {self.path}: {self.message}"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "path": self.path,
            "node_id": self.node_id,
        }


@dataclass
class TemplateValidationResult:
    """Result of template validation."""
    valid: bool
    errors: List[TemplateIssue] = field(default_factory=list)
    warnings: List[TemplateIssue] = field(default_factory=list)


class TemplateValidator:
    """Validates designer template JSON.

    Validation Rules:
    1. Template has a name and a known targetModule
    2. Form schema passes FormSchemaValidator
    3. Every workflow node has an id and a known type
    4. Workflow graph passes GraphValidator (only once rule 3 holds)
    """

    def __init__(self):
        self.form_validator = FormSchemaValidator()
        self.graph_validator = GraphValidator()

    def validate(self, raw: Dict[str, Any]) -> TemplateValidationResult:
        errors: List[TemplateIssue] = []
        warnings: List[TemplateIssue] = []

        self._validate_metadata(raw, errors)
        self._validate_form_schema(raw, errors, warnings)
        self._validate_workflow(raw, errors, warnings)

        if errors:
            logger.debug(f"Template {raw.get('id')} has {len(errors)} authoring error(s)")

        return TemplateValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def validate_template(self, template: ProcessTemplate) -> TemplateValidationResult:
        return self.validate(template.to_dict())

    def _validate_metadata(self, raw: Dict[str, Any], errors: List[TemplateIssue]) -> None:
        if not (raw.get("name") or "").strip():
            errors.append(TemplateIssue(
                code="MISSING_NAME",
                message="Template name is required",
                path="$.name",
            ))

        target = raw.get("targetModule", raw.get("target_module"))
        if target is not None and target not in VALID_TARGET_MODULES:
            errors.append(TemplateIssue(
                code="INVALID_TARGET_MODULE",
                message=f"Invalid targetModule: {target}",
                path="$.targetModule",
            ))

    def _validate_form_schema(
        self,
        raw: Dict[str, Any],
        errors: List[TemplateIssue],
        warnings: List[TemplateIssue],
    ) -> None:
        schema = raw.get("formSchema", raw.get("form_schema")) or []
        result = self.form_validator.validate(schema)
        for issue in result.errors:
            errors.append(TemplateIssue(code=issue.code.value, message=issue.message, path=issue.path))
        for issue in result.warnings:
            warnings.append(TemplateIssue(code=issue.code.value, message=issue.message, path=issue.path))

    def _validate_workflow(
        self,
        raw: Dict[str, Any],
        errors: List[TemplateIssue],
        warnings: List[TemplateIssue],
    ) -> None:
        nodes = raw.get("workflow") or []

        malformed = False
        for i, node in enumerate(nodes):
            path = f"$.workflow[{i}]"
            if not node.get("id"):
                errors.append(TemplateIssue(
                    code="MISSING_NODE_ID",
                    message="Node missing required attribute: id",
                    path=path,
                ))
                malformed = True
            if node.get("type") not in VALID_NODE_TYPES:
                errors.append(TemplateIssue(
                    code="INVALID_NODE_TYPE",
                    message=f"Invalid node type: {node.get('type')}",
                    path=f"{path}.type",
                    node_id=node.get("id"),
                ))
                malformed = True

        # Graph checks need parseable nodes
        if malformed:
            return

        workflow = Workflow.from_list(nodes)
        positions = {}
        for i, node in enumerate(workflow):
            positions.setdefault(node.id, i)

        result = self.graph_validator.validate(workflow)
        for source, target in ((result.errors, errors), (result.warnings, warnings)):
            for issue in source:
                path = "$.workflow"
                if issue.node_id in positions:
                    path = f"$.workflow[{positions[issue.node_id]}]"
                target.append(TemplateIssue(
                    code=issue.code.value,
                    message=issue.message,
                    path=path,
                    node_id=issue.node_id or None,
                ))
