"""Domain entities."""

from src.core.entities.employee import Employee, EmployeeRole, Location, Requester
from src.core.entities.order import DRAFT_STATUS, Order
from src.core.entities.overview import (
    EmployeeReminderState,
    EmployeeReminderStatusRow,
    OverviewStats,
    ReminderOverview,
    ReminderThreadSummary,
)
from src.core.entities.reminder import (
    ChannelConfig,
    DeliveryChannel,
    DevicePushToken,
    InAppNotification,
    PushDeliveryResult,
    PushStatus,
    ReminderDeliveryLogEntry,
    ReminderEvent,
    ReminderEventType,
    ReminderSource,
    ReminderStatus,
    ReminderThread,
    utc_now,
)
from src.core.entities.rule import (
    DEFAULT_RULE_TIMEZONE,
    ConditionType,
    RecurringReminderRule,
    RuleScope,
)
from src.core.entities.settings import ReminderSettingsPatch, ReminderSystemSettings

__all__ = [
    # Identity
    "Employee",
    "EmployeeRole",
    "Location",
    "Requester",
    # Orders
    "DRAFT_STATUS",
    "Order",
    # Reminders
    "ChannelConfig",
    "DeliveryChannel",
    "DevicePushToken",
    "InAppNotification",
    "PushDeliveryResult",
    "PushStatus",
    "ReminderDeliveryLogEntry",
    "ReminderEvent",
    "ReminderEventType",
    "ReminderSource",
    "ReminderStatus",
    "ReminderThread",
    "utc_now",
    # Rules
    "DEFAULT_RULE_TIMEZONE",
    "ConditionType",
    "RecurringReminderRule",
    "RuleScope",
    # Settings
    "ReminderSettingsPatch",
    "ReminderSystemSettings",
    # Overview
    "EmployeeReminderState",
    "EmployeeReminderStatusRow",
    "OverviewStats",
    "ReminderOverview",
    "ReminderThreadSummary",
]
