"""Get/Update Reminder Settings Use Cases."""

from src.application.dto.requests import UpdateReminderSettingsRequest
from src.application.dto.responses import ReminderSettingsResponse
from src.config import get_logger, get_settings
from src.core.entities.employee import Requester
from src.core.entities.settings import (
    OVERDUE_THRESHOLD_RANGE,
    RATE_LIMIT_MINUTES_RANGE,
    RECURRING_WINDOW_MINUTES_RANGE,
    ReminderSettingsPatch,
    ReminderSystemSettings,
)
from src.core.interfaces.storage import IReminderSettingsStore
from src.core.services.access import ensure_manager

logger = get_logger(__name__)


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    return max(bounds[0], min(bounds[1], value))


def default_reminder_settings(org_id: str | None = None) -> ReminderSystemSettings:
    """Settings built from REMINDER_ configuration, for orgs without a row."""
    config = get_settings().reminders
    return ReminderSystemSettings(
        org_id=org_id or config.org_id,
        overdue_threshold_days=_clamp(
            config.default_overdue_threshold_days, OVERDUE_THRESHOLD_RANGE
        ),
        reminder_rate_limit_minutes=_clamp(
            config.default_rate_limit_minutes, RATE_LIMIT_MINUTES_RANGE
        ),
        recurring_window_minutes=_clamp(
            config.default_recurring_window_minutes, RECURRING_WINDOW_MINUTES_RANGE
        ),
    )


async def load_reminder_settings(
    store: IReminderSettingsStore, org_id: str | None = None
) -> ReminderSystemSettings:
    """Load the organisation's settings once for an operation."""
    org_id = org_id or get_settings().reminders.org_id
    settings = await store.get_settings(org_id)
    if settings is None:
        logger.warning("reminder_settings_missing", org_id=org_id)
        return default_reminder_settings(org_id)
    return settings


def settings_to_response(settings: ReminderSystemSettings) -> ReminderSettingsResponse:
    return ReminderSettingsResponse(
        org_id=settings.org_id,
        overdue_threshold_days=settings.overdue_threshold_days,
        reminder_rate_limit_minutes=settings.reminder_rate_limit_minutes,
        recurring_window_minutes=settings.recurring_window_minutes,
        updated_at=settings.updated_at,
    )


class _SettingsUseCase:
    def __init__(self, settings_store: IReminderSettingsStore | None = None):
        self._settings_store = settings_store

    async def _get_settings_store(self) -> IReminderSettingsStore:
        if self._settings_store is None:
            from src.infrastructure.storage.sqlite import get_settings_store

            self._settings_store = await get_settings_store()
        return self._settings_store


class GetReminderSettingsUseCase(_SettingsUseCase):
    """Read the effective settings."""

    async def execute(self, requester: Requester | None) -> ReminderSystemSettings:
        ensure_manager(requester)
        return await load_reminder_settings(await self._get_settings_store())


class UpdateReminderSettingsUseCase(_SettingsUseCase):
    """Apply a partial settings update. An empty patch returns current settings."""

    async def execute(
        self,
        request: UpdateReminderSettingsRequest,
        requester: Requester | None,
    ) -> ReminderSystemSettings:
        ensure_manager(requester)
        store = await self._get_settings_store()
        patch = ReminderSettingsPatch(**request.model_dump())
        if patch.is_empty():
            return await load_reminder_settings(store)

        updated = await store.update_settings(get_settings().reminders.org_id, patch)
        logger.info(
            "reminder_settings_changed",
            user_id=requester.user_id if requester else None,
            **patch.model_dump(exclude_none=True),
        )
        return updated
