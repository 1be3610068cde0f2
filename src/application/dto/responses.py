"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from src.core.entities.overview import ReminderOverview
from src.core.entities.reminder import (
    DeliveryChannel,
    PushDeliveryResult,
    ReminderEventType,
    ReminderStatus,
)


class ReminderSettingsResponse(BaseModel):
    """Effective organisation settings."""

    org_id: str
    overdue_threshold_days: int
    reminder_rate_limit_minutes: int
    recurring_window_minutes: int
    updated_at: datetime | None = None


class ReminderThreadResponse(BaseModel):
    """Reminder thread in response."""

    id: str
    employee_id: str
    manager_id: str | None = None
    location_id: str | None = None
    status: ReminderStatus
    created_at: datetime
    last_reminded_at: datetime
    reminder_count: int


class ReminderEventResponse(BaseModel):
    """Immutable delivery event in response."""

    id: str
    reminder_id: str
    event_type: ReminderEventType
    sent_at: datetime
    channels_attempted: list[DeliveryChannel] = Field(default_factory=list)
    delivery_result: dict[str, Any] = Field(default_factory=dict)


class SendReminderResponse(BaseModel):
    """Outcome of a manual send."""

    reminder: ReminderThreadResponse
    event: ReminderEventResponse
    push: PushDeliveryResult
    notifications_enabled: bool
    in_app_notification_id: str | None = None
    channels_attempted: list[DeliveryChannel] = Field(default_factory=list)
    settings: ReminderSettingsResponse
    warnings: list[str] = Field(default_factory=list)


class RecurringEvaluationResponse(BaseModel):
    """Summary of one recurring evaluation pass."""

    evaluated_rules: int = 0
    due_rules: int = 0
    reminders_sent: int = 0
    skipped_by_condition: int = 0
    skipped_by_rate_limit: int = 0
    skipped_by_quiet_hours: int = 0
    errors: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    dry_run: bool = False
    evaluated_at: datetime | None = None


class ChannelsResponse(BaseModel):
    push: bool
    in_app: bool


class RecurringRuleResponse(BaseModel):
    """Recurring reminder rule in response."""

    id: str
    scope: str
    employee_id: str | None = None
    location_id: str | None = None
    days_of_week: list[int]
    time_of_day: str
    timezone: str
    condition_type: str
    condition_value: int | None = None
    quiet_hours_enabled: bool
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None
    channels: ChannelsResponse
    enabled: bool
    created_by: str | None = None
    last_triggered_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RecurringRuleListResponse(BaseModel):
    rules: list[RecurringRuleResponse]
    total: int


class DeliveryEventResponse(BaseModel):
    """Delivery log row: event joined with its thread and employee."""

    event: ReminderEventResponse
    employee_id: str
    employee_name: str | None = None
    manager_id: str | None = None
    location_id: str | None = None


class DeliveryEventListResponse(BaseModel):
    events: list[DeliveryEventResponse]
    total: int
    limit: int


class ReminderOverviewResponse(ReminderOverview):
    """Manager dashboard snapshot."""


class DatabaseHealthResponse(BaseModel):
    """Database health status."""

    available: bool
    schema_version: str | None = None
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: DatabaseHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. EMPLOYEE_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: Any = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
