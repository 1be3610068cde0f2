"""Validation of recurring rule definitions before they are stored."""

from src.core.entities.rule import ConditionType, RecurringReminderRule, RuleScope
from src.core.exceptions import RuleValidationError
from src.core.services.schedule import (
    firing_window_crosses_midnight,
    parse_time_to_minutes,
    resolve_timezone,
)


def validate_rule(rule: RecurringReminderRule, recurring_window_minutes: int) -> None:
    """
    Reject inconsistent rules.

    Raises:
        RuleValidationError: Scope/target, days, condition or window problems.
        InvalidTimeOfDayError: A time string does not parse.
        InvalidTimezoneError: Unknown timezone.
    """
    if rule.scope == RuleScope.EMPLOYEE:
        if not rule.employee_id or rule.location_id:
            raise RuleValidationError(
                "employee_id", "Employee-scoped rules need employee_id and no location_id"
            )
    elif not rule.location_id or rule.employee_id:
        raise RuleValidationError(
            "location_id", "Location-scoped rules need location_id and no employee_id"
        )

    if not rule.days_of_week:
        raise RuleValidationError("days_of_week", "At least one day is required")
    if any(day < 0 or day > 6 for day in rule.days_of_week):
        raise RuleValidationError(
            "days_of_week", "Days must be between 0 (Sunday) and 6", rule.days_of_week
        )

    if rule.condition_type == ConditionType.DAYS_SINCE_LAST_ORDER_GTE:
        if rule.condition_value is None or rule.condition_value < 0:
            raise RuleValidationError(
                "condition_value", "A non-negative day count is required", rule.condition_value
            )
    elif rule.condition_value is not None:
        raise RuleValidationError(
            "condition_value", "no_order_today takes no value", rule.condition_value
        )

    parse_time_to_minutes(rule.time_of_day)
    resolve_timezone(rule.timezone)

    if rule.quiet_hours_enabled:
        parse_time_to_minutes(rule.quiet_hours_start, "quiet_hours_start")
        parse_time_to_minutes(rule.quiet_hours_end, "quiet_hours_end")

    if firing_window_crosses_midnight(rule.time_of_day, recurring_window_minutes):
        raise RuleValidationError(
            "time_of_day",
            f"Firing window of {recurring_window_minutes} minutes would cross midnight",
            rule.time_of_day,
        )
