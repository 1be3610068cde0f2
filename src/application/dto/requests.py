"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from pydantic import BaseModel, Field

from src.core.entities.reminder import ReminderSource
from src.core.entities.rule import DEFAULT_RULE_TIMEZONE, ConditionType, RuleScope


class ChannelsRequest(BaseModel):
    """Channel selection; both channels default to on."""

    push: bool = True
    in_app: bool = True


class SendReminderRequest(BaseModel):
    """Manual reminder to one employee."""

    employee_id: str = Field(..., min_length=1, description="Employee user ID")
    location_id: str | None = Field(
        default=None,
        description="Location the reminder is about; defaults to the employee's location",
    )
    message: str | None = Field(
        default=None,
        max_length=500,
        description="Custom body; blank uses the default reminder text",
    )
    override_rate_limit: bool = Field(
        default=False,
        description="Send even if the thread was reminded within the rate limit",
    )
    source: ReminderSource = Field(
        default=ReminderSource.MANUAL,
        description="What triggered the send",
    )
    channels: ChannelsRequest | None = Field(default=None)


class EvaluateRecurringRulesRequest(BaseModel):
    """One evaluation pass of the recurring engine."""

    dry_run: bool = Field(
        default=False,
        description="Count what would be sent without writing anything",
    )


class UpsertRecurringRuleRequest(BaseModel):
    """Create or replace a recurring reminder rule.

    Structural checks (scope vs. target, time strings, firing window) run in
    the use case so they can take the organisation's window setting into
    account.
    """

    id: str | None = Field(default=None, description="Existing rule ID to replace")
    scope: RuleScope
    employee_id: str | None = None
    location_id: str | None = None
    days_of_week: list[int] = Field(
        ...,
        description="Local weekdays, 0 = Sunday",
        examples=[[1, 2, 3, 4, 5]],
    )
    time_of_day: str = Field(..., examples=["09:00"])
    timezone: str = DEFAULT_RULE_TIMEZONE
    condition_type: ConditionType = ConditionType.NO_ORDER_TODAY
    condition_value: int | None = None
    quiet_hours_enabled: bool = False
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None
    channels: ChannelsRequest = Field(default_factory=ChannelsRequest)
    enabled: bool = True


class UpdateReminderSettingsRequest(BaseModel):
    """Partial settings update."""

    overdue_threshold_days: int | None = Field(default=None, ge=1, le=60)
    reminder_rate_limit_minutes: int | None = Field(default=None, ge=1, le=240)
    recurring_window_minutes: int | None = Field(default=None, ge=1, le=120)
