"""Process template model.

A template is the authored unit: a form schema plus a workflow graph,
surfaced in either the service or the production module. Serialized in the
designer's camelCase JSON shape (formSchema, targetModule, nextNodes).
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from procflow.domain.forms.models import FormFieldConfig, FormSchema, find_field, parse_schema
from procflow.domain.workflow.models import Workflow


class TargetModule(str, Enum):
    """Which menu and domain surfaces a template."""
    SERVICE = "service"
    PRODUCTION = "production"


def new_template_id() -> str:
    """Time-based template id, as generated on first save."""
    return f"tpl_{int(time.time() * 1000)}"


@dataclass
class ProcessTemplate:
    """Form schema + workflow graph bound to a target module."""
    id: Optional[str]
    name: str
    description: str = ""
    target_module: TargetModule = TargetModule.SERVICE
    form_schema: FormSchema = field(default_factory=list)
    workflow: Workflow = field(default_factory=lambda: Workflow([]))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    revision: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ProcessTemplate":
        """Create from designer JSON. Accepts camelCase or snake_case keys."""
        target = raw.get("targetModule", raw.get("target_module")) or TargetModule.SERVICE.value
        schema = raw.get("formSchema", raw.get("form_schema")) or []
        return cls(
            id=raw.get("id") or None,
            name=raw.get("name", ""),
            description=raw.get("description") or "",
            target_module=TargetModule(target),
            form_schema=parse_schema(schema),
            workflow=Workflow.from_list(raw.get("workflow") or []),
            created_at=_parse_timestamp(raw.get("created_at")),
            updated_at=_parse_timestamp(raw.get("updated_at")),
            revision=int(raw.get("revision") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "targetModule": self.target_module.value,
            "formSchema": [f.to_dict() for f in self.form_schema],
            "workflow": self.workflow.to_list(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "revision": self.revision,
        }

    def find_field(self, key: str) -> Optional[FormFieldConfig]:
        """Find a schema field by id, falling back to label."""
        return find_field(self.form_schema, key)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
