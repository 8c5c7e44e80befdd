"""Form data validation and form schema authoring checks.

Two concerns live here:

- validate(): required-field checks of a data bag against a schema. All
  fields are checked; errors are never fail-fast.
- FormSchemaValidator: structural checks of an authored schema (unique ids
  and labels, options on choice fields, known field types).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Set

from procflow.domain.forms.models import (
    CHOICE_TYPES,
    FieldType,
    FormSchema,
    StorageKey,
    read_value,
)

REQUIRED_MESSAGE = "required"


def is_unanswered(value: Any) -> bool:
    """True if a value counts as absent for required-field purposes."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def validate(
    schema: FormSchema,
    data: Dict[str, Any],
    mode: StorageKey = StorageKey.ID,
) -> Dict[str, str]:
    """Validate a data bag against a form schema.

    Args:
        schema: Ordered field definitions
        data: The order's dynamic data bag
        mode: Data bag keying

    Returns:
        Mapping of field label to error message; empty when valid
    """
    errors: Dict[str, str] = {}
    for form_field in schema:
        if form_field.is_layout or not form_field.required:
            continue
        if is_unanswered(read_value(form_field, data, mode)):
            errors[form_field.label] = REQUIRED_MESSAGE
    return errors


class FormSchemaErrorCode(str, Enum):
    """Error codes for form schema authoring checks."""
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FIELD_TYPE = "INVALID_FIELD_TYPE"
    DUPLICATE_FIELD_ID = "DUPLICATE_FIELD_ID"
    DUPLICATE_LABEL = "DUPLICATE_LABEL"
    MISSING_OPTIONS = "MISSING_OPTIONS"
    UNUSED_OPTIONS = "UNUSED_OPTIONS"
    REQUIRED_LAYOUT_FIELD = "REQUIRED_LAYOUT_FIELD"


@dataclass
class FormSchemaIssue:
    """A single schema problem."""
    code: FormSchemaErrorCode
    message: str
    path: str = ""

    def __str__(self) -> str:
        if self.path:
            return f"[{self.code.value}] {self.path}: {self.message}"
        return f"[{self.code.value}] {self.message}"


@dataclass
class FormSchemaValidationResult:
    """Result of form schema validation."""
    valid: bool
    errors: List[FormSchemaIssue] = field(default_factory=list)
    warnings: List[FormSchemaIssue] = field(default_factory=list)


class FormSchemaValidator:
    """Validates an authored form schema (raw designer JSON).

    Rules:
    1. Every field has id, label and a known type
    2. Field ids are unique
    3. Labels are unique (they are display keys for errors and legacy data)
    4. Choice fields declare at least one option
    """

    VALID_TYPES: Set[str] = {t.value for t in FieldType}
    CHOICE_TYPE_VALUES: Set[str] = {t.value for t in CHOICE_TYPES}
    LAYOUT_TYPE_VALUES = {FieldType.DIVIDER.value, FieldType.NOTE.value}

    def validate(self, raw: List[Dict[str, Any]]) -> FormSchemaValidationResult:
        errors: List[FormSchemaIssue] = []
        warnings: List[FormSchemaIssue] = []

        seen_ids: Set[str] = set()
        seen_labels: Set[str] = set()

        for i, item in enumerate(raw or []):
            path = f"$.formSchema[{i}]"
            for name in ("id", "label", "type"):
                if not item.get(name):
                    errors.append(FormSchemaIssue(
                        code=FormSchemaErrorCode.MISSING_REQUIRED_FIELD,
                        message=f"Field missing required attribute: {name}",
                        path=path,
                    ))

            field_type = item.get("type")
            if field_type and field_type not in self.VALID_TYPES:
                errors.append(FormSchemaIssue(
                    code=FormSchemaErrorCode.INVALID_FIELD_TYPE,
                    message=f"Invalid field type: {field_type}",
                    path=f"{path}.type",
                ))

            field_id = item.get("id")
            if field_id:
                if field_id in seen_ids:
                    errors.append(FormSchemaIssue(
                        code=FormSchemaErrorCode.DUPLICATE_FIELD_ID,
                        message=f"Duplicate field id: {field_id}",
                        path=f"{path}.id",
                    ))
                seen_ids.add(field_id)

            is_layout = field_type in self.LAYOUT_TYPE_VALUES
            label = item.get("label")
            if label and not is_layout:
                if label in seen_labels:
                    errors.append(FormSchemaIssue(
                        code=FormSchemaErrorCode.DUPLICATE_LABEL,
                        message=f"Duplicate field label: {label}",
                        path=f"{path}.label",
                    ))
                seen_labels.add(label)

            options = item.get("options") or []
            if field_type in self.CHOICE_TYPE_VALUES and not [o for o in options if o]:
                errors.append(FormSchemaIssue(
                    code=FormSchemaErrorCode.MISSING_OPTIONS,
                    message=f"Choice field '{label}' has no options",
                    path=f"{path}.options",
                ))
            elif options and field_type and field_type not in self.CHOICE_TYPE_VALUES:
                warnings.append(FormSchemaIssue(
                    code=FormSchemaErrorCode.UNUSED_OPTIONS,
                    message=f"Options are ignored for '{field_type}' field '{label}'",
                    path=f"{path}.options",
                ))

            if is_layout and item.get("required"):
                warnings.append(FormSchemaIssue(
                    code=FormSchemaErrorCode.REQUIRED_LAYOUT_FIELD,
                    message=f"'{field_type}' fields cannot be required",
                    path=f"{path}.required",
                ))

        return FormSchemaValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )
