"""Tests for environment settings and the log processors."""

import pytest
from pydantic import ValidationError

from src.config import get_settings, reset_settings
from src.config.logging import mask_secrets
from src.config.settings import APISettings, PushSettings, ReminderSettings


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("STORAGE_DB_NAME", "x.db")
        monkeypatch.setenv("REMINDER_DEFAULT_RATE_LIMIT_MINUTES", "30")

        settings = get_settings()

        assert settings.storage.db_path == tmp_path / "x.db"
        assert settings.reminders.default_rate_limit_minutes == 30

    def test_settings_are_cached_until_reset(self):
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first

    def test_cors_origins_accept_comma_list(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("API_CORS_ORIGINS", "https://a.test, https://b.test")
        assert APISettings().cors_origins == ["https://a.test", "https://b.test"]

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError, match="Unknown IANA timezone"):
            ReminderSettings(default_timezone="Mars/Olympus_Mons")

    def test_push_chunk_size_capped_at_expo_limit(self):
        with pytest.raises(ValidationError):
            PushSettings(chunk_size=101)


class TestMaskSecrets:
    def test_sensitive_keys_are_hidden(self):
        event = mask_secrets(None, "info", {"event": "x", "token": "abc", "service_token": "s"})
        assert event["token"] == "***"
        assert event["service_token"] == "***"

    def test_push_tokens_keep_last_four_characters(self):
        event = mask_secrets(None, "info", {"event": "sent", "to": "ExponentPushToken[abcdef1234]"})
        assert event["to"] == "ExponentPushToken[...1234]"

    def test_other_values_untouched(self):
        event = mask_secrets(None, "info", {"event": "sent", "employee_id": "emp-1", "count": 2})
        assert event == {"event": "sent", "employee_id": "emp-1", "count": 2}
