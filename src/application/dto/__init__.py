"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    ChannelsRequest,
    EvaluateRecurringRulesRequest,
    SendReminderRequest,
    UpdateReminderSettingsRequest,
    UpsertRecurringRuleRequest,
)
from src.application.dto.responses import (
    DatabaseHealthResponse,
    DeliveryEventListResponse,
    DeliveryEventResponse,
    ErrorResponse,
    HealthResponse,
    RecurringEvaluationResponse,
    RecurringRuleListResponse,
    RecurringRuleResponse,
    ReminderEventResponse,
    ReminderOverviewResponse,
    ReminderSettingsResponse,
    ReminderThreadResponse,
    SendReminderResponse,
)

__all__ = [
    # Requests
    "ChannelsRequest",
    "EvaluateRecurringRulesRequest",
    "SendReminderRequest",
    "UpdateReminderSettingsRequest",
    "UpsertRecurringRuleRequest",
    # Responses
    "DatabaseHealthResponse",
    "DeliveryEventListResponse",
    "DeliveryEventResponse",
    "ErrorResponse",
    "HealthResponse",
    "RecurringEvaluationResponse",
    "RecurringRuleListResponse",
    "RecurringRuleResponse",
    "ReminderEventResponse",
    "ReminderOverviewResponse",
    "ReminderSettingsResponse",
    "ReminderThreadResponse",
    "SendReminderResponse",
]
