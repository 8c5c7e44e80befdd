"""Generic form renderer.

Interprets a form schema against an arbitrary data bag. The renderer does not
draw anything itself; it produces per-field view models that a UI layer turns
into widgets, and it owns the controlled-mutation rules:

- Edit mode: every change goes through apply_change(), which returns a new
  data bag with exactly one key replaced. The caller's dict is never mutated.
- Read-only mode: project() returns display-only values and never invokes
  the change callback.
- File fields: the renderer hands content to an upload collaborator and
  writes only the returned server-assigned name into the bag.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from procflow.domain.forms.models import (
    FieldType,
    FormFieldConfig,
    FormSchema,
    StorageKey,
    find_field,
    read_value,
)
from procflow.domain.forms.validator import is_unanswered
from procflow.domain.errors import UploadFailure

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS = ["IT部", "生产部", "售后部", "研发部"]

ChangeCallback = Callable[[str, Any], None]


class Widget(str, Enum):
    """Input affordance for a field type."""
    TEXT_INPUT = "text_input"
    TEXT_AREA = "text_area"
    NUMBER_INPUT = "number_input"
    DATE_PICKER = "date_picker"
    TIME_PICKER = "time_picker"
    DROPDOWN = "dropdown"
    RADIO_GROUP = "radio_group"
    CHECKBOX_GROUP = "checkbox_group"
    USER_PICKER = "user_picker"
    DEPT_PICKER = "dept_picker"
    FILE_UPLOAD = "file_upload"
    DIVIDER = "divider"
    NOTE = "note"


WIDGETS: Dict[FieldType, Widget] = {
    FieldType.TEXT: Widget.TEXT_INPUT,
    FieldType.TEXTAREA: Widget.TEXT_AREA,
    FieldType.NUMBER: Widget.NUMBER_INPUT,
    FieldType.DATE: Widget.DATE_PICKER,
    FieldType.TIME: Widget.TIME_PICKER,
    FieldType.SELECT: Widget.DROPDOWN,
    FieldType.RADIO: Widget.RADIO_GROUP,
    FieldType.CHECKBOX: Widget.CHECKBOX_GROUP,
    FieldType.USER: Widget.USER_PICKER,
    FieldType.DEPT: Widget.DEPT_PICKER,
    FieldType.FILE: Widget.FILE_UPLOAD,
    FieldType.DIVIDER: Widget.DIVIDER,
    FieldType.NOTE: Widget.NOTE,
}


class DisplayKind(str, Enum):
    """Read-only projection kinds."""
    TEXT = "text"
    LINK = "link"
    CHIPS = "chips"
    UNANSWERED = "unanswered"
    DIVIDER = "divider"
    NOTE = "note"


UNANSWERED_TEXT = {
    FieldType.FILE: "无附件",
    FieldType.CHECKBOX: "未选择",
}
DEFAULT_UNANSWERED_TEXT = "未填写"


@dataclass
class DisplayField:
    """Display-only projection of one field."""
    field_id: str
    label: str
    kind: DisplayKind
    text: str = ""
    href: Optional[str] = None
    chips: List[str] = field(default_factory=list)


@dataclass
class RenderedField:
    """Editable view model of one field."""
    config: FormFieldConfig
    widget: Widget
    value: Any
    error: Optional[str] = None
    options: List[str] = field(default_factory=list)
    _emit: Optional[Callable[[Any], None]] = field(default=None, repr=False)

    @property
    def show_required_marker(self) -> bool:
        return self.config.required and not self.config.is_layout

    def change(self, value: Any) -> None:
        """Forward a user edit to the change callback."""
        if self._emit is not None:
            self._emit(value)


@dataclass
class UploadOutcome:
    """Result of a file-field upload."""
    data: Dict[str, Any]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _ordered_unique(values: Sequence[Any]) -> List[str]:
    result: List[str] = []
    for value in values:
        text = str(value)
        if text not in result:
            result.append(text)
    return result


class FormRenderer:
    """Interprets a form schema against data bags."""

    def __init__(
        self,
        schema: FormSchema,
        mode: StorageKey = StorageKey.ID,
        upload_url_prefix: str = "/data",
        users: Optional[Sequence[str]] = None,
        departments: Optional[Sequence[str]] = None,
    ):
        self.schema = schema
        self.mode = mode
        self.upload_url_prefix = upload_url_prefix.rstrip("/")
        self.users = list(users or [])
        self.departments = list(departments or DEFAULT_DEPARTMENTS)

    # ------------------------------------------------------------------
    # Controlled mutation
    # ------------------------------------------------------------------

    def _data_field(self, key: str) -> FormFieldConfig:
        form_field = find_field(self.schema, key)
        if form_field is None:
            raise KeyError(f"Unknown form field: {key}")
        if form_field.is_layout:
            raise ValueError(f"'{form_field.type.value}' field '{form_field.label}' holds no data")
        return form_field

    def coerce(self, form_field: FormFieldConfig, value: Any) -> Any:
        """Normalize a raw input value to the field's value shape.

        Single-valued fields accept a one-element list as its element;
        longer lists raise ValueError.
        """
        if value is None:
            return None
        if form_field.is_multi_valued:
            if isinstance(value, str):
                value = [value] if value else []
            return _ordered_unique(value)
        if isinstance(value, (list, tuple)):
            if not value:
                return None
            if len(value) > 1:
                raise ValueError(f"Field '{form_field.label}' takes a single value")
            value = value[0]
        return str(value)

    def apply_change(self, data: Dict[str, Any], key: str, value: Any) -> Dict[str, Any]:
        """Return a new data bag with one field's value replaced.

        Args:
            data: Current data bag (not modified)
            key: Field id or label
            value: New value; None clears the answer

        Returns:
            New data bag
        """
        form_field = self._data_field(key)
        storage_key = form_field.storage_key(self.mode)
        legacy_key = form_field.label if self.mode == StorageKey.ID else form_field.id

        updated = dict(data)
        if legacy_key != storage_key:
            updated.pop(legacy_key, None)
        coerced = self.coerce(form_field, value)
        if coerced is None:
            updated.pop(storage_key, None)
        else:
            updated[storage_key] = coerced
        return updated

    def apply_changes(self, data: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply several edits; each one is an apply_change()."""
        updated = data
        for key, value in changes.items():
            updated = self.apply_change(updated, key, value)
        return updated

    def toggle_option(self, data: Dict[str, Any], key: str, option: str) -> Dict[str, Any]:
        """Check or uncheck one checkbox option."""
        form_field = self._data_field(key)
        if not form_field.is_multi_valued:
            raise ValueError(f"Field '{form_field.label}' is not a checkbox field")
        current = read_value(form_field, data, self.mode)
        values = list(current) if isinstance(current, (list, tuple)) else []
        if option in values:
            values = [v for v in values if v != option]
        else:
            values.append(option)
        return self.apply_change(data, key, values)

    async def upload_file(
        self,
        data: Dict[str, Any],
        key: str,
        filename: str,
        content: str,
        mime_type: str,
        uploader: Any,
    ) -> UploadOutcome:
        """Upload a file for a file field and store the returned name.

        A failed upload leaves the field unanswered and reports the error for
        this field only.
        """
        form_field = self._data_field(key)
        if form_field.type != FieldType.FILE:
            raise ValueError(f"Field '{form_field.label}' is not a file field")
        try:
            result = await uploader.upload(filename, content, mime_type)
        except UploadFailure as e:
            logger.warning(f"Upload failed for field '{form_field.label}': {e}")
            return UploadOutcome(data=dict(data), error=str(e))
        return UploadOutcome(data=self.apply_change(data, key, result.filename))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def options_for(self, form_field: FormFieldConfig) -> List[str]:
        if form_field.is_choice:
            return list(form_field.options)
        if form_field.type == FieldType.USER:
            return list(self.users)
        if form_field.type == FieldType.DEPT:
            return list(self.departments)
        return []

    def render(
        self,
        data: Dict[str, Any],
        errors: Optional[Dict[str, str]] = None,
        on_change: Optional[ChangeCallback] = None,
    ) -> List[RenderedField]:
        """Build editable view models, one per schema field.

        Each RenderedField.change(value) calls on_change(storage_key, value).
        """
        errors = errors or {}
        rendered: List[RenderedField] = []
        for form_field in self.schema:
            emit = None
            if on_change is not None and not form_field.is_layout:
                storage_key = form_field.storage_key(self.mode)
                emit = (lambda k: lambda value: on_change(k, value))(storage_key)
            value = None if form_field.is_layout else read_value(form_field, data, self.mode)
            rendered.append(RenderedField(
                config=form_field,
                widget=WIDGETS[form_field.type],
                value=value,
                error=errors.get(form_field.label),
                options=self.options_for(form_field),
                _emit=emit,
            ))
        return rendered

    def project(self, data: Dict[str, Any]) -> List[DisplayField]:
        """Build the read-only projection of a data bag."""
        projected: List[DisplayField] = []
        for form_field in self.schema:
            projected.append(self._project_field(form_field, data))
        return projected

    def _project_field(self, form_field: FormFieldConfig, data: Dict[str, Any]) -> DisplayField:
        base = {"field_id": form_field.id, "label": form_field.label}

        if form_field.type == FieldType.DIVIDER:
            return DisplayField(kind=DisplayKind.DIVIDER, **base)
        if form_field.type == FieldType.NOTE:
            return DisplayField(kind=DisplayKind.NOTE, text=form_field.description or "说明文字", **base)

        value = read_value(form_field, data, self.mode)
        if is_unanswered(value):
            placeholder = UNANSWERED_TEXT.get(form_field.type, DEFAULT_UNANSWERED_TEXT)
            return DisplayField(kind=DisplayKind.UNANSWERED, text=placeholder, **base)

        if form_field.type == FieldType.FILE:
            return DisplayField(
                kind=DisplayKind.LINK,
                text=str(value),
                href=f"{self.upload_url_prefix}/{value}",
                **base,
            )
        if form_field.type == FieldType.CHECKBOX:
            chips = list(value) if isinstance(value, (list, tuple, set)) else [str(value)]
            return DisplayField(kind=DisplayKind.CHIPS, chips=[str(c) for c in chips], **base)
        return DisplayField(kind=DisplayKind.TEXT, text=str(value), **base)
