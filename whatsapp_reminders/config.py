"""Configuration management for the WhatsApp Reminder service."""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


def _load_env_file() -> None:
    """Load .env from root directory if present."""
    env_path = Path(__file__).parent.parent / ".env"
    if not env_path.is_file():
        return
    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                key, value = stripped.split("=", 1)
                key, value = key.strip(), value.strip().strip("'\"")
                if key and value and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        pass


_load_env_file()


DEFAULT_APP_NAME = "WhatsApp Reminder Server"
DEFAULT_APP_VERSION = "1.0.0"


def _env_int(name: str, fallback: int) -> int:
    try:
        return int(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _env_float(name: str, fallback: float) -> float:
    try:
        return float(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _env_flag(name: str, fallback: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return fallback
    return raw.strip().lower() not in {"0", "false", "no", "off"}


class Settings(BaseModel):
    """Application settings with environment fallbacks."""

    # App metadata
    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)

    # Server runtime
    server_host: str = Field(default=os.getenv("WA_REMINDERS_HOST", "0.0.0.0"))
    server_port: int = Field(default=_env_int("WA_REMINDERS_PORT", 8001))

    # Supabase database
    supabase_url: Optional[str] = Field(default=os.getenv("SUPABASE_URL"))
    supabase_key: Optional[str] = Field(default=os.getenv("SUPABASE_KEY"))

    # HTTP behaviour
    cors_allow_origins_raw: str = Field(default=os.getenv("WA_REMINDERS_CORS_ALLOW_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"))
    enable_docs: bool = Field(default=os.getenv("WA_REMINDERS_ENABLE_DOCS", "1") != "0")
    docs_url: Optional[str] = Field(default=os.getenv("WA_REMINDERS_DOCS_URL", "/docs"))

    # Scheduler timing (seconds)
    check_interval_seconds: int = Field(default=_env_int("WA_REMINDERS_CHECK_INTERVAL", 15))
    due_tolerance_seconds: int = Field(default=_env_int("WA_REMINDERS_DUE_TOLERANCE", 30))
    cooldown_seconds: int = Field(default=_env_int("WA_REMINDERS_COOLDOWN", 300))
    reminder_refresh_seconds: int = Field(default=_env_int("WA_REMINDERS_REFRESH_INTERVAL", 60))
    sound_fade_seconds: float = Field(default=_env_float("WA_REMINDERS_SOUND_FADE", 1.5))

    # IANA zone used for wall-clock reminder times; empty means the host zone
    timezone: Optional[str] = Field(default=os.getenv("WA_REMINDERS_TIMEZONE") or None)

    # Notification defaults (can be changed at runtime through /api/preferences)
    sound_enabled: bool = Field(default=_env_flag("WA_REMINDERS_SOUND", True))
    browser_notifications: bool = Field(default=_env_flag("WA_REMINDERS_NOTIFICATIONS", True))
    preview_messages: bool = Field(default=_env_flag("WA_REMINDERS_PREVIEW_MESSAGES", True))
    preview_length: int = Field(default=_env_int("WA_REMINDERS_PREVIEW_LENGTH", 50))
    auto_open_whatsapp: bool = Field(default=_env_flag("WA_REMINDERS_AUTO_OPEN", True))
    add_indian_country_code: bool = Field(default=_env_flag("WA_REMINDERS_ADD_INDIAN_CODE", True))

    # Notification outbox retention
    notification_history_size: int = Field(default=_env_int("WA_REMINDERS_NOTIFICATION_HISTORY", 200))

    @property
    def cors_allow_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_allow_origins_raw.strip() in {"", "*"}:
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins_raw.split(",") if origin.strip()]

    @property
    def resolved_docs_url(self) -> Optional[str]:
        """Return documentation URL when docs are enabled."""
        return (self.docs_url or "/docs") if self.enable_docs else None

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
