"""
Process configuration loaded from the environment (and ``.env``).

Per-organisation knobs that managers edit at runtime (rate limit, overdue
threshold, recurring window) live in the ``reminder_system_settings`` table;
the ``REMINDER_*`` values here are only the fallbacks used when that row is
missing or out of range.
"""

from pathlib import Path
from typing import Annotated, Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "reminders.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0, description="Milliseconds")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AUTH_")

    # Bearer token for the cron caller of the recurring evaluation endpoint
    service_token: str | None = None


class PushSettings(BaseSettings):
    """Expo push API client."""

    model_config = SettingsConfigDict(env_prefix="PUSH_")

    endpoint: str = "https://exp.host/--/api/v2/push/send"
    access_token: str | None = None
    timeout_seconds: float = Field(default=10.0, gt=0)
    # Expo accepts at most 100 messages per request
    chunk_size: int = Field(default=100, ge=1, le=100)
    max_retries: int = Field(default=2, ge=0)
    retry_delay: float = Field(default=0.5, ge=0)


class ReminderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REMINDER_")

    org_id: str = "00000000-0000-0000-0000-000000000001"
    default_timezone: str = "America/Los_Angeles"

    default_overdue_threshold_days: int = Field(default=7, ge=1, le=365)
    default_rate_limit_minutes: int = Field(default=15, ge=1, le=1440)
    default_recurring_window_minutes: int = Field(default=15, ge=1, le=120)

    title: str = "Order reminder"
    default_message: str = "Please submit your order when you have a moment."

    max_concurrent_dispatches: int = Field(default=5, ge=1)

    @field_validator("default_timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown IANA timezone: {v}") from e
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Employee Reminder Engine"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    push: PushSettings = Field(default_factory=PushSettings)
    reminders: ReminderSettings = Field(default_factory=ReminderSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Settings for this process, read once."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
