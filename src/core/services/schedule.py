"""
Schedule evaluation for recurring reminder rules.

All wall-clock reasoning happens in the rule's own timezone: weekday
(0 = Sunday), minute of day and the local calendar date.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.core.entities.rule import RecurringReminderRule
from src.core.entities.settings import ReminderSystemSettings
from src.core.exceptions import InvalidTimeOfDayError, InvalidTimezoneError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


@dataclass(frozen=True)
class LocalClock:
    """A UTC instant seen from one timezone."""

    weekday: int
    minute_of_day: int
    date_key: date


def parse_time_to_minutes(value: str | None, field: str = "time_of_day") -> int:
    """
    Parse ``H:MM`` or ``HH:MM`` (an optional ``:SS`` suffix is ignored).

    Raises:
        InvalidTimeOfDayError: Malformed string or out-of-range component.
    """
    match = _TIME_PATTERN.match((value or "").strip())
    if not match:
        raise InvalidTimeOfDayError(field, value)

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeOfDayError(field, value)
    if match.group(3) is not None and int(match.group(3)) > 59:
        raise InvalidTimeOfDayError(field, value)
    return hour * 60 + minute


def resolve_timezone(name: str | None) -> ZoneInfo:
    """Look up an IANA zone, raising InvalidTimezoneError for unknown names."""
    if not name:
        raise InvalidTimezoneError(name)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezoneError(name) from e


def local_clock(now_utc: datetime, tz: ZoneInfo) -> LocalClock:
    local = now_utc.astimezone(tz)
    # datetime.weekday() is Monday=0; rules use Sunday=0
    return LocalClock(
        weekday=(local.weekday() + 1) % 7,
        minute_of_day=local.hour * 60 + local.minute,
        date_key=local.date(),
    )


def date_key(moment: datetime, tz: ZoneInfo) -> date:
    """Calendar date of an instant in a timezone."""
    return moment.astimezone(tz).date()


def is_time_in_range(minute: int, start: int, end: int) -> bool:
    """
    Half-open ``[start, end)`` check on minutes of day.

    ``start > end`` wraps midnight; ``start == end`` covers the whole day.
    """
    if start == end:
        return True
    if start < end:
        return start <= minute < end
    return minute >= start or minute < end


def firing_window_crosses_midnight(time_of_day: str, window_minutes: int) -> bool:
    scheduled = parse_time_to_minutes(time_of_day)
    return scheduled + max(1, window_minutes) > MINUTES_PER_DAY


def is_in_quiet_hours(rule: RecurringReminderRule, now_utc: datetime) -> bool:
    """True when quiet hours are enabled, both bounds parse and now falls inside them."""
    if not rule.quiet_hours_enabled:
        return False
    if not rule.quiet_hours_start or not rule.quiet_hours_end:
        return False
    try:
        start = parse_time_to_minutes(rule.quiet_hours_start, "quiet_hours_start")
        end = parse_time_to_minutes(rule.quiet_hours_end, "quiet_hours_end")
    except InvalidTimeOfDayError:
        return False

    clock = local_clock(now_utc, resolve_timezone(rule.timezone))
    return is_time_in_range(clock.minute_of_day, start, end)


def is_rule_due_now(
    rule: RecurringReminderRule,
    settings: ReminderSystemSettings,
    now_utc: datetime,
) -> bool:
    """
    Whether a rule should fire on this pass.

    Due iff today's local weekday is scheduled, the local minute lies in
    ``[time_of_day, time_of_day + window)`` without wrapping past midnight,
    and the rule has not already fired on today's local date.

    Raises:
        InvalidTimeOfDayError: ``time_of_day`` does not parse.
        InvalidTimezoneError: Unknown timezone.
    """
    scheduled = parse_time_to_minutes(rule.time_of_day)
    tz = resolve_timezone(rule.timezone)
    clock = local_clock(now_utc, tz)

    if clock.weekday not in rule.days_of_week:
        return False

    window = max(1, settings.recurring_window_minutes)
    if not scheduled <= clock.minute_of_day < scheduled + window:
        return False

    if rule.last_triggered_at is not None and date_key(rule.last_triggered_at, tz) == clock.date_key:
        return False

    return True
