"""Tests for the process template model and designer defaults."""

from datetime import datetime, timezone

import pytest

from procflow.domain.forms.models import FieldType
from procflow.domain.templates.defaults import (
    DEFAULT_TEMPLATE_NAME,
    default_template,
    new_field,
    new_node,
)
from procflow.domain.templates.models import ProcessTemplate, TargetModule
from procflow.domain.workflow.models import ROLE_ALL, NodeType
from tests.helpers.factories import sample_template


class TestProcessTemplate:
    """Tests for ProcessTemplate serialization."""

    def test_round_trip(self):
        template = sample_template()
        template.created_at = datetime(2026, 3, 1, tzinfo=timezone.utc)

        restored = ProcessTemplate.from_dict(template.to_dict())

        assert restored.id == "tpl_repair"
        assert restored.form_schema == template.form_schema
        assert restored.workflow == template.workflow
        assert restored.created_at == template.created_at

    def test_to_dict_uses_designer_keys(self):
        raw = sample_template().to_dict()
        assert raw["targetModule"] == "service"
        assert raw["formSchema"][0]["id"] == "f_phone"
        assert raw["workflow"][0]["nextNodes"] == ["approval"]

    def test_from_dict_accepts_snake_case(self):
        template = ProcessTemplate.from_dict({
            "id": "tpl_1",
            "name": "生产流程",
            "target_module": "production",
            "form_schema": [{"id": "f_1", "label": "A", "type": "text"}],
            "workflow": [],
        })
        assert template.target_module == TargetModule.PRODUCTION
        assert template.form_schema[0].label == "A"

    def test_blank_id_means_unsaved(self):
        assert ProcessTemplate.from_dict({"id": "", "name": "x"}).id is None

    def test_naive_timestamp_treated_as_utc(self):
        template = ProcessTemplate.from_dict({"name": "x", "created_at": "2026-01-01T08:00:00"})
        assert template.created_at.tzinfo == timezone.utc

    def test_find_field(self):
        template = sample_template()
        assert template.find_field("故障部件").id == "f_parts"
        assert template.find_field("f_remark").label == "备注"


class TestDefaults:
    """Tests for designer starting points."""

    def test_default_template(self):
        template = default_template(TargetModule.PRODUCTION)
        assert template.id is None
        assert template.name == DEFAULT_TEMPLATE_NAME
        assert template.target_module == TargetModule.PRODUCTION
        assert template.form_schema == []
        assert [n.id for n in template.workflow] == [
            "start", "approval", "exclusive_gate", "process_repair", "process_replace", "end",
        ]

    @pytest.mark.parametrize("field_type", [FieldType.SELECT, FieldType.RADIO, FieldType.CHECKBOX])
    def test_new_choice_field_has_options(self, field_type):
        assert new_field(field_type, "f_1").options == ["选项1", "选项2"]

    def test_new_layout_fields(self):
        assert new_field(FieldType.DIVIDER, "f_1").label == "分割线"
        note = new_field(FieldType.NOTE, "f_2")
        assert note.label == "说明文字"
        assert note.description

    def test_new_node(self):
        node = new_node("node_1")
        assert node.type == NodeType.PROCESS
        assert node.role == ROLE_ALL
        assert node.next_nodes == []
