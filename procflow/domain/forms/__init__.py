"""Dynamic form schemas: field vocabulary, validation and rendering."""

from procflow.domain.forms.models import (
    CHOICE_TYPES,
    LAYOUT_TYPES,
    FieldType,
    FieldWidth,
    FormFieldConfig,
    FormSchema,
    StorageKey,
    find_field,
    migrate_data_keys,
    new_field_id,
    parse_schema,
    read_value,
)
from procflow.domain.forms.validator import (
    REQUIRED_MESSAGE,
    FormSchemaErrorCode,
    FormSchemaIssue,
    FormSchemaValidationResult,
    FormSchemaValidator,
    is_unanswered,
    validate,
)
from procflow.domain.forms.renderer import (
    DisplayField,
    DisplayKind,
    FormRenderer,
    RenderedField,
    UploadOutcome,
    Widget,
)

__all__ = [
    "CHOICE_TYPES",
    "LAYOUT_TYPES",
    "FieldType",
    "FieldWidth",
    "FormFieldConfig",
    "FormSchema",
    "StorageKey",
    "find_field",
    "migrate_data_keys",
    "new_field_id",
    "parse_schema",
    "read_value",
    "REQUIRED_MESSAGE",
    "FormSchemaErrorCode",
    "FormSchemaIssue",
    "FormSchemaValidationResult",
    "FormSchemaValidator",
    "is_unanswered",
    "validate",
    "DisplayField",
    "DisplayKind",
    "FormRenderer",
    "RenderedField",
    "UploadOutcome",
    "Widget",
]
