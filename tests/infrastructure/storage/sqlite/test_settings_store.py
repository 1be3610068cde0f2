"""Tests for SQLiteReminderSettingsStore."""

import pytest

from src.core.entities import ReminderSettingsPatch
from src.infrastructure.storage.sqlite import SQLiteReminderSettingsStore
from tests.factories import ORG_ID


@pytest.fixture
def store(migrated_db) -> SQLiteReminderSettingsStore:
    return SQLiteReminderSettingsStore()


class TestSettingsStore:
    """Settings row reads and partial updates."""

    async def test_seeded_defaults(self, store):
        """The migration seeds the default organisation."""
        settings = await store.get_settings(ORG_ID)
        assert settings.overdue_threshold_days == 7
        assert settings.reminder_rate_limit_minutes == 15
        assert settings.recurring_window_minutes == 15

    async def test_missing_org(self, store):
        assert await store.get_settings("other-org") is None

    async def test_partial_update(self, store):
        """Only provided fields change."""
        updated = await store.update_settings(
            ORG_ID, ReminderSettingsPatch(reminder_rate_limit_minutes=30)
        )
        assert updated.reminder_rate_limit_minutes == 30
        assert updated.overdue_threshold_days == 7

    async def test_update_creates_missing_row(self, store):
        updated = await store.update_settings(
            "other-org", ReminderSettingsPatch(overdue_threshold_days=3)
        )
        assert updated.org_id == "other-org"
        assert updated.overdue_threshold_days == 3
