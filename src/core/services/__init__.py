"""Core business logic services."""

from src.core.services.access import ensure_manager
from src.core.services.conditions import days_between, employee_qualifies
from src.core.services.notification_dispatcher import DispatchResult, NotificationDispatcher
from src.core.services.rate_limiter import RateLimitDecision, check_rate_limit
from src.core.services.recurring_engine import (
    CandidateOutcome,
    RecurringEvaluationResult,
    RecurringRuleEngine,
)
from src.core.services.reminder_overview import ReminderOverviewService
from src.core.services.reminder_sender import (
    ReminderSender,
    SendReminderCommand,
    SendReminderResult,
)
from src.core.services.reminder_threads import ActiveThreadLookup, ReminderThreadService
from src.core.services.rule_validation import validate_rule
from src.core.services.schedule import (
    is_in_quiet_hours,
    is_rule_due_now,
    is_time_in_range,
    parse_time_to_minutes,
    resolve_timezone,
)

__all__ = [
    "ActiveThreadLookup",
    "CandidateOutcome",
    "DispatchResult",
    "NotificationDispatcher",
    "RateLimitDecision",
    "RecurringEvaluationResult",
    "RecurringRuleEngine",
    "ReminderOverviewService",
    "ReminderSender",
    "ReminderThreadService",
    "SendReminderCommand",
    "SendReminderResult",
    "check_rate_limit",
    "days_between",
    "employee_qualifies",
    "ensure_manager",
    "is_in_quiet_hours",
    "is_rule_due_now",
    "is_time_in_range",
    "parse_time_to_minutes",
    "resolve_timezone",
    "validate_rule",
]
