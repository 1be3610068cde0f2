"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers and the CLI.
"""

from src.application.dto.requests import (
    EvaluateRecurringRulesRequest,
    SendReminderRequest,
    UpdateReminderSettingsRequest,
    UpsertRecurringRuleRequest,
)
from src.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    RecurringEvaluationResponse,
    ReminderOverviewResponse,
    SendReminderResponse,
)
from src.application.services import (
    get_notification_dispatcher,
    get_overview_service,
    get_recurring_engine,
    get_reminder_sender,
    reset_services,
)
from src.application.use_cases import (
    DeleteRecurringRuleUseCase,
    EvaluateRecurringRulesUseCase,
    GetReminderSettingsUseCase,
    ListEmployeeReminderStatusUseCase,
    ListRecurringRulesUseCase,
    ListReminderDeliveryEventsUseCase,
    SendReminderUseCase,
    UpdateReminderSettingsUseCase,
    UpsertRecurringRuleUseCase,
)

__all__ = [
    # Request DTOs
    "EvaluateRecurringRulesRequest",
    "SendReminderRequest",
    "UpdateReminderSettingsRequest",
    "UpsertRecurringRuleRequest",
    # Response DTOs
    "ErrorResponse",
    "HealthResponse",
    "RecurringEvaluationResponse",
    "ReminderOverviewResponse",
    "SendReminderResponse",
    # Use Cases
    "SendReminderUseCase",
    "ListEmployeeReminderStatusUseCase",
    "EvaluateRecurringRulesUseCase",
    "GetReminderSettingsUseCase",
    "UpdateReminderSettingsUseCase",
    "ListRecurringRulesUseCase",
    "UpsertRecurringRuleUseCase",
    "DeleteRecurringRuleUseCase",
    "ListReminderDeliveryEventsUseCase",
    # Service factories
    "get_notification_dispatcher",
    "get_reminder_sender",
    "get_recurring_engine",
    "get_overview_service",
    "reset_services",
]
