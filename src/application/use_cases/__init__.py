"""Application use cases."""

from src.application.use_cases.evaluate_recurring_rules import EvaluateRecurringRulesUseCase
from src.application.use_cases.list_delivery_events import ListReminderDeliveryEventsUseCase
from src.application.use_cases.list_reminder_status import ListEmployeeReminderStatusUseCase
from src.application.use_cases.manage_recurring_rules import (
    DeleteRecurringRuleUseCase,
    ListRecurringRulesUseCase,
    UpsertRecurringRuleUseCase,
)
from src.application.use_cases.reminder_settings import (
    GetReminderSettingsUseCase,
    UpdateReminderSettingsUseCase,
    default_reminder_settings,
    load_reminder_settings,
)
from src.application.use_cases.send_reminder import SendReminderUseCase

__all__ = [
    "SendReminderUseCase",
    "ListEmployeeReminderStatusUseCase",
    "EvaluateRecurringRulesUseCase",
    "GetReminderSettingsUseCase",
    "UpdateReminderSettingsUseCase",
    "ListRecurringRulesUseCase",
    "UpsertRecurringRuleUseCase",
    "DeleteRecurringRuleUseCase",
    "ListReminderDeliveryEventsUseCase",
    "default_reminder_settings",
    "load_reminder_settings",
]
