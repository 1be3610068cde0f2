"""Organisation-wide reminder settings."""

from datetime import datetime

from pydantic import BaseModel, Field

OVERDUE_THRESHOLD_RANGE = (1, 60)
RATE_LIMIT_MINUTES_RANGE = (1, 240)
RECURRING_WINDOW_MINUTES_RANGE = (1, 120)


class ReminderSystemSettings(BaseModel):
    """
    Singleton settings row per organisation.

    Loaded once per operation and passed explicitly to every component.
    """

    org_id: str
    overdue_threshold_days: int = Field(default=7, ge=1, le=60)
    reminder_rate_limit_minutes: int = Field(default=15, ge=1, le=240)
    recurring_window_minutes: int = Field(default=15, ge=1, le=120)
    updated_at: datetime | None = None

    def with_overdue_threshold(self, days: int | None) -> "ReminderSystemSettings":
        """Copy with an overridden threshold, clamped to the allowed range."""
        if days is None:
            return self
        low, high = OVERDUE_THRESHOLD_RANGE
        return self.model_copy(update={"overdue_threshold_days": max(low, min(high, int(days)))})


class ReminderSettingsPatch(BaseModel):
    """Partial settings update; unset fields are left unchanged."""

    overdue_threshold_days: int | None = Field(default=None, ge=1, le=60)
    reminder_rate_limit_minutes: int | None = Field(default=None, ge=1, le=240)
    recurring_window_minutes: int | None = Field(default=None, ge=1, le=120)

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)
