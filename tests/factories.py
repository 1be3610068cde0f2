"""Shared builders and fixed instants for tests."""

from datetime import UTC, datetime

from src.core.entities import RecurringReminderRule, RuleScope

ORG_ID = "00000000-0000-0000-0000-000000000001"

# Wednesday 2024-03-06 09:00 in America/Los_Angeles (PST, UTC-8)
WEDNESDAY_9AM_LA = datetime(2024, 3, 6, 17, 0, tzinfo=UTC)
WEDNESDAY = 3


def make_rule(**overrides) -> RecurringReminderRule:
    """Location rule firing at 09:00 LA time on Wednesdays unless overridden."""
    values = {
        "id": "rule-1",
        "scope": RuleScope.LOCATION,
        "location_id": "loc-1",
        "days_of_week": [WEDNESDAY],
        "time_of_day": "09:00",
        "timezone": "America/Los_Angeles",
    }
    values.update(overrides)
    return RecurringReminderRule(**values)
