"""Template authoring operations."""

import logging
from typing import Any, Dict, List, Tuple

from procflow.domain.errors import StructuralGraphError
from procflow.domain.templates.models import ProcessTemplate
from procflow.domain.templates.validator import TemplateValidationResult, TemplateValidator
from procflow.persistence.repositories import TemplateStore

logger = logging.getLogger(__name__)


class TemplateService:
    """Saves and validates templates.

    Validation is advisory by default: a template with structural errors is
    still saved and the findings are returned alongside it. With strict set,
    such saves are refused.
    """

    def __init__(self, store: TemplateStore, strict: bool = False):
        self.store = store
        self.strict = strict
        self.validator = TemplateValidator()

    async def list_templates(self) -> List[ProcessTemplate]:
        return await self.store.list_templates()

    async def get_template(self, template_id: str) -> ProcessTemplate:
        return await self.store.get_template(template_id)

    def validate(self, raw: Dict[str, Any]) -> TemplateValidationResult:
        return self.validator.validate(raw)

    async def save_template(self, raw: Dict[str, Any]) -> Tuple[ProcessTemplate, TemplateValidationResult]:
        """Validate designer JSON, then upsert it.

        Raises:
            StructuralGraphError: strict mode and the template has errors
        """
        result = self.validator.validate(raw)
        if result.errors:
            summary = "; ".join(str(e) for e in result.errors)
            if self.strict:
                raise StructuralGraphError(f"Template rejected: {summary}", template_id=raw.get("id"))
            logger.warning(f"Saving template {raw.get('id') or '(new)'} with errors: {summary}")

        # Unknown types and missing ids cannot be stored even in advisory mode
        try:
            template = ProcessTemplate.from_dict(raw)
        except (KeyError, ValueError) as e:
            raise StructuralGraphError(f"Template cannot be parsed: {e}", template_id=raw.get("id")) from e

        saved = await self.store.save_template(template)
        return saved, result
