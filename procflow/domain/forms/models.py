"""Typed models for dynamic form schemas.

A form schema is an ordered list of FormFieldConfig entries authored in the
process designer. Order data is kept in a flat "data bag" keyed per field.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FieldType(str, Enum):
    """Renderable field types."""
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    USER = "user"
    DEPT = "dept"
    FILE = "file"
    DIVIDER = "divider"
    NOTE = "note"


class FieldWidth(str, Enum):
    """Layout hint."""
    HALF = "half"
    FULL = "full"


class StorageKey(str, Enum):
    """Which field attribute keys the order data bag."""
    ID = "id"
    LABEL = "label"


# Layout directives never carry data and never produce errors
LAYOUT_TYPES = frozenset({FieldType.DIVIDER, FieldType.NOTE})

# Types whose value is chosen from `options`
CHOICE_TYPES = frozenset({FieldType.SELECT, FieldType.RADIO, FieldType.CHECKBOX})


def new_field_id() -> str:
    """Generate a designer-style field id."""
    return f"f_{int(time.time() * 1000)}"


@dataclass
class FormFieldConfig:
    """One renderable input definition."""
    id: str
    label: str
    type: FieldType
    required: bool = False
    width: FieldWidth = FieldWidth.FULL
    options: List[str] = field(default_factory=list)
    placeholder: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_layout(self) -> bool:
        """True for divider/note directives."""
        return self.type in LAYOUT_TYPES

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES

    @property
    def is_multi_valued(self) -> bool:
        return self.type == FieldType.CHECKBOX

    def storage_key(self, mode: StorageKey = StorageKey.ID) -> str:
        """Key under which this field's value lives in the data bag."""
        return self.id if mode == StorageKey.ID else self.label

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FormFieldConfig":
        """Create from raw dict (designer JSON)."""
        return cls(
            id=raw["id"],
            label=raw.get("label", ""),
            type=FieldType(raw["type"]),
            required=bool(raw.get("required", False)),
            width=FieldWidth(raw.get("width") or FieldWidth.FULL.value),
            options=list(raw.get("options") or []),
            placeholder=raw.get("placeholder"),
            description=raw.get("description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
            "width": self.width.value,
            "options": list(self.options),
        }
        if self.placeholder is not None:
            result["placeholder"] = self.placeholder
        if self.description is not None:
            result["description"] = self.description
        return result


FormSchema = List[FormFieldConfig]


def parse_schema(raw: List[Dict[str, Any]]) -> FormSchema:
    """Parse a designer form schema array."""
    return [FormFieldConfig.from_dict(item) for item in raw or []]


def find_field(schema: FormSchema, key: str) -> Optional[FormFieldConfig]:
    """Find a field by id, falling back to label."""
    for candidate in schema:
        if candidate.id == key:
            return candidate
    for candidate in schema:
        if candidate.label == key:
            return candidate
    return None


def read_value(
    form_field: FormFieldConfig,
    data: Dict[str, Any],
    mode: StorageKey = StorageKey.ID,
) -> Any:
    """Read a field's value from a data bag.

    Bags written before id keying store values under the label, so the
    other key is consulted when the primary one is absent.
    """
    primary = form_field.storage_key(mode)
    if primary in data:
        return data[primary]
    other = form_field.label if mode == StorageKey.ID else form_field.id
    return data.get(other)


def migrate_data_keys(schema: FormSchema, data: Dict[str, Any]) -> Dict[str, Any]:
    """Rewrite label-keyed values to id keys.

    Keys that match no field are kept untouched so historical answers for
    since-renamed fields are not lost. Returns a new dict.
    """
    migrated = dict(data)
    for form_field in schema:
        if form_field.is_layout or form_field.id == form_field.label:
            continue
        if form_field.label in migrated and form_field.id not in migrated:
            migrated[form_field.id] = migrated.pop(form_field.label)
    return migrated
