"""Process templates: the authored form + workflow unit."""

from procflow.domain.templates.models import ProcessTemplate, TargetModule, new_template_id
from procflow.domain.templates.validator import (
    TemplateIssue,
    TemplateValidationResult,
    TemplateValidator,
)
from procflow.domain.templates.defaults import default_template, default_workflow, new_field, new_node

__all__ = [
    "ProcessTemplate",
    "TargetModule",
    "new_template_id",
    "TemplateIssue",
    "TemplateValidationResult",
    "TemplateValidator",
    "default_template",
    "default_workflow",
    "new_field",
    "new_node",
]
