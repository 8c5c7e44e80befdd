"""Tests for capability-driven navigation."""

from procflow.domain.access import visible_resources
from procflow.domain.roles import Capability, get_role_capabilities
from procflow.domain.templates.models import TargetModule
from tests.helpers.factories import sample_template


def templates():
    return [
        sample_template("tpl_svc", TargetModule.SERVICE),
        sample_template("tpl_prd", TargetModule.PRODUCTION),
    ]


class TestVisibleResources:
    """Tests for visible_resources."""

    def test_empty_capabilities_see_nothing(self):
        menu = visible_resources(set(), templates())
        assert menu.items == []
        assert menu.service_processes == []
        assert menu.production_processes == []

    def test_admin_sees_everything(self):
        menu = visible_resources(set(Capability), templates())
        assert menu.keys == [
            "dashboard", "orders", "production_list", "production_entry",
            "production_repair", "designer", "admin",
        ]
        assert [p.key for p in menu.service_processes] == ["process:tpl_svc"]
        assert [p.key for p in menu.production_processes] == ["process:tpl_prd"]

    def test_single_entry_capability_shows_production_entry(self):
        menu = visible_resources({Capability.PROD_ENTRY_AGING}, templates())
        assert menu.keys == ["production_entry"]
        assert [p.path for p in menu.production_processes] == ["/process/tpl_prd"]
        assert menu.service_processes == []

    def test_view_orders_shows_service_processes_only(self):
        menu = visible_resources({Capability.VIEW_ORDERS}, templates())
        assert menu.keys == ["orders"]
        assert [p.label for p in menu.service_processes] == ["售后维修流程"]
        assert menu.production_processes == []

    def test_technician_defaults(self):
        menu = visible_resources(get_role_capabilities("TECHNICIAN"), templates())
        assert "designer" not in menu.keys
        assert "orders" in menu.keys

    def test_pure_function(self):
        caps = {Capability.VIEW_ORDERS}
        assert visible_resources(caps, templates()) == visible_resources(caps, templates())

    def test_to_dict(self):
        menu = visible_resources({Capability.VIEW_DASHBOARD}, [])
        assert menu.to_dict() == {
            "items": [{"key": "dashboard", "label": "数据仪表盘", "path": "/dashboard"}],
            "service_processes": [],
            "production_processes": [],
        }
