"""Application configuration management."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

from procflow.domain.forms.models import StorageKey

load_dotenv()


@dataclass
class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "Process Platform"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])

    # Database (empty: in-memory stores)
    database_url: str = ""
    database_echo: bool = False

    # Uploads
    upload_dir: str = "./data/uploads"
    upload_url_prefix: str = "/data"
    upload_max_bytes: int = 20 * 1024 * 1024

    # Workflow
    advance_past_start: bool = True
    default_assignee_id: Optional[str] = None
    strict_template_validation: bool = False
    form_storage_key: str = "id"  # id or label

    # Notifications (chat robot webhooks; none set: log only)
    wecom_webhook: Optional[str] = None
    dingtalk_webhook: Optional[str] = None
    feishu_webhook: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # json or text

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.form_storage_key not in {k.value for k in StorageKey}:
            raise ValueError(f"FORM_STORAGE_KEY must be 'id' or 'label', got '{self.form_storage_key}'")

    @property
    def storage_mode(self) -> StorageKey:
        return StorageKey(self.form_storage_key)

    @property
    def uses_database(self) -> bool:
        return bool(self.database_url)

    @property
    def has_webhooks(self) -> bool:
        return any((self.wecom_webhook, self.dingtalk_webhook, self.feishu_webhook))

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


def load_settings_from_env() -> Settings:
    """Load settings from environment variables."""

    def get_bool(key: str, default: bool = False) -> bool:
        value = os.getenv(key, str(default)).lower()
        return value in ("true", "1", "yes")

    def get_int(key: str, default: int) -> int:
        return int(os.getenv(key, str(default)))

    def get_list(key: str, default: List[str]) -> List[str]:
        value = os.getenv(key)
        if value:
            return [item.strip() for item in value.split(",")]
        return default

    return Settings(
        # App
        app_name=os.getenv("APP_NAME", "Process Platform"),
        app_version=os.getenv("APP_VERSION", "0.1.0"),
        debug=get_bool("DEBUG", False),
        environment=os.getenv("ENVIRONMENT", "development"),

        # Server
        host=os.getenv("HOST", "0.0.0.0"),
        port=get_int("PORT", 8000),
        allowed_origins=get_list("ALLOWED_ORIGINS", ["http://localhost:5173"]),

        # Database
        database_url=os.getenv("DATABASE_URL", ""),
        database_echo=get_bool("DATABASE_ECHO", False),

        # Uploads
        upload_dir=os.getenv("UPLOAD_DIR", "./data/uploads"),
        upload_url_prefix=os.getenv("UPLOAD_URL_PREFIX", "/data"),
        upload_max_bytes=get_int("UPLOAD_MAX_BYTES", 20 * 1024 * 1024),

        # Workflow
        advance_past_start=get_bool("ADVANCE_PAST_START", True),
        default_assignee_id=os.getenv("DEFAULT_ASSIGNEE_ID") or None,
        strict_template_validation=get_bool("STRICT_TEMPLATE_VALIDATION", False),
        form_storage_key=os.getenv("FORM_STORAGE_KEY", "id").lower(),

        # Notifications
        wecom_webhook=os.getenv("WECOM_WEBHOOK") or None,
        dingtalk_webhook=os.getenv("DINGTALK_WEBHOOK") or None,
        feishu_webhook=os.getenv("FEISHU_WEBHOOK") or None,

        # Logging
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text"),
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings_from_env()


def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    get_settings.cache_clear()
