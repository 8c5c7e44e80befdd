"""Tests for application configuration."""

import os
from unittest.mock import patch

import pytest

from procflow.domain.forms.models import StorageKey
from procflow.settings import Settings, clear_settings_cache, get_settings, load_settings_from_env


class TestSettings:
    """Tests for Settings dataclass."""

    def test_default_settings(self):
        """Default settings run on in-memory stores."""
        settings = Settings()
        assert settings.app_name == "Process Platform"
        assert settings.uses_database is False
        assert settings.storage_mode == StorageKey.ID
        assert settings.advance_past_start is True
        assert settings.has_webhooks is False

    def test_is_production(self):
        """is_production reflects environment."""
        assert Settings(environment="production").is_production is True
        assert Settings(environment="development").is_production is False

    def test_invalid_storage_key(self):
        """Only id or label keying is accepted."""
        with pytest.raises(ValueError, match="FORM_STORAGE_KEY"):
            Settings(form_storage_key="name")

    def test_has_webhooks(self):
        """Any configured robot enables webhooks."""
        assert Settings(feishu_webhook="https://feishu.test/hook").has_webhooks is True


class TestLoadSettingsFromEnv:
    """Tests for loading settings from environment."""

    def test_loads_defaults_without_env(self):
        """Loads default values when env vars not set."""
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings_from_env()
            assert settings.database_url == ""
            assert settings.upload_url_prefix == "/data"
            assert settings.default_assignee_id is None

    def test_loads_workflow_settings(self):
        """Workflow switches come from the environment."""
        env = {
            "ADVANCE_PAST_START": "false",
            "STRICT_TEMPLATE_VALIDATION": "1",
            "FORM_STORAGE_KEY": "LABEL",
            "DEFAULT_ASSIGNEE_ID": "u_ops",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings_from_env()
            assert settings.advance_past_start is False
            assert settings.strict_template_validation is True
            assert settings.storage_mode == StorageKey.LABEL
            assert settings.default_assignee_id == "u_ops"

    def test_loads_int_and_list(self):
        """Loads integer and comma-separated values."""
        env = {"PORT": "9000", "ALLOWED_ORIGINS": "http://a.com, http://b.com"}
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings_from_env()
            assert settings.port == 9000
            assert settings.allowed_origins == ["http://a.com", "http://b.com"]

    def test_loads_webhooks(self):
        """Webhook URLs use the robot names."""
        with patch.dict(os.environ, {"WECOM_WEBHOOK": "https://wecom.test/hook"}, clear=True):
            settings = load_settings_from_env()
            assert settings.wecom_webhook == "https://wecom.test/hook"
            assert settings.has_webhooks is True


class TestGetSettings:
    """Tests for cached settings."""

    def test_cached_until_cleared(self):
        """get_settings caches; clear_settings_cache resets."""
        with patch.dict(os.environ, {"APP_NAME": "First"}, clear=True):
            clear_settings_cache()
            first = get_settings()
            assert get_settings() is first

        with patch.dict(os.environ, {"APP_NAME": "Second"}, clear=True):
            clear_settings_cache()
            assert get_settings().app_name == "Second"
        clear_settings_cache()
