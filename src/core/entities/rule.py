"""Recurring reminder rule entity."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.core.entities.reminder import ChannelConfig, utc_now

DEFAULT_RULE_TIMEZONE = "America/Los_Angeles"


class RuleScope(str, Enum):
    """Who a rule targets."""

    EMPLOYEE = "employee"
    LOCATION = "location"


class ConditionType(str, Enum):
    """Order-activity condition an employee must meet to be reminded."""

    NO_ORDER_TODAY = "no_order_today"
    DAYS_SINCE_LAST_ORDER_GTE = "days_since_last_order_gte"


class RecurringReminderRule(BaseModel):
    """
    Standing schedule definition.

    Fires at most once per local calendar day in ``timezone``; the date of
    ``last_triggered_at`` in that zone is the guard. Structural consistency
    (scope vs. target, time strings, firing window) is checked by
    ``src.core.services.rule_validation`` before a rule is stored.
    """

    id: str | None = None
    scope: RuleScope
    employee_id: str | None = None
    location_id: str | None = None
    days_of_week: list[int] = Field(default_factory=list)
    time_of_day: str
    timezone: str = DEFAULT_RULE_TIMEZONE
    condition_type: ConditionType = ConditionType.NO_ORDER_TODAY
    condition_value: int | None = None
    quiet_hours_enabled: bool = False
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None
    channels: ChannelConfig = Field(default_factory=ChannelConfig)
    enabled: bool = True
    created_by: str | None = None
    last_triggered_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def target_id(self) -> str | None:
        if self.scope == RuleScope.EMPLOYEE:
            return self.employee_id
        return self.location_id
