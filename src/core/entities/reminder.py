"""Reminder thread, delivery event and notification entities."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

EXPO_TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")


def utc_now() -> datetime:
    return datetime.now(UTC)


class ReminderStatus(str, Enum):
    """Lifecycle state of a reminder thread."""

    ACTIVE = "active"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class ReminderEventType(str, Enum):
    """Kind of audit record written for a thread."""

    SENT = "sent"
    REMINDED_AGAIN = "reminded_again"
    AUTO_RESOLVED = "auto_resolved"
    CANCELLED = "cancelled"


class ReminderSource(str, Enum):
    """What triggered a send."""

    MANUAL = "manual"
    MANUAL_REPEAT = "manual_repeat"
    RECURRING = "recurring"
    SYSTEM = "system"


class DeliveryChannel(str, Enum):
    PUSH = "push"
    IN_APP = "in_app"


class PushStatus(str, Enum):
    """Outcome of the push channel for one dispatch."""

    SENT = "sent"
    PARTIAL = "partial"
    FAILED = "failed"
    NO_TOKENS = "no_tokens"
    PUSH_DISABLED = "not_delivered_push_disabled"
    NOT_REQUESTED = "not_requested"


class ChannelConfig(BaseModel):
    """Which channels a send should use. Both default to enabled."""

    push: bool = True
    in_app: bool = True

    @classmethod
    def from_raw(cls, raw: Any) -> "ChannelConfig":
        """Read a loosely-typed JSON value, keeping defaults for anything not boolean."""
        if not isinstance(raw, dict):
            return cls()
        return cls(
            push=raw["push"] if isinstance(raw.get("push"), bool) else True,
            in_app=raw["in_app"] if isinstance(raw.get("in_app"), bool) else True,
        )


class PushDeliveryResult(BaseModel):
    """Aggregated push outcome across all token chunks."""

    attempted: bool = False
    status: PushStatus = PushStatus.NOT_REQUESTED
    token_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    details: list[dict[str, Any]] = Field(default_factory=list)


class ReminderThread(BaseModel):
    """
    Open need-to-remind state for one (employee, location) pair.

    At most one thread per pair may be active; re-triggers bump
    reminder_count instead of creating a new row.
    """

    id: str | None = None
    employee_id: str
    manager_id: str | None = None
    location_id: str | None = None
    status: ReminderStatus = ReminderStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    last_reminded_at: datetime = Field(default_factory=utc_now)
    reminder_count: int = Field(default=1, ge=1)
    resolved_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == ReminderStatus.ACTIVE


class ReminderEvent(BaseModel):
    """Immutable audit record of one dispatch attempt or resolution."""

    id: str | None = None
    reminder_id: str
    event_type: ReminderEventType = ReminderEventType.SENT
    sent_at: datetime = Field(default_factory=utc_now)
    channels_attempted: list[DeliveryChannel] = Field(default_factory=list)
    delivery_result: dict[str, Any] = Field(default_factory=dict)


class ReminderDeliveryLogEntry(BaseModel):
    """Event joined with its thread and employee, for the delivery log."""

    event: ReminderEvent
    employee_id: str
    manager_id: str | None = None
    location_id: str | None = None
    employee_name: str | None = None


class InAppNotification(BaseModel):
    """Notification row shown inside the app."""

    id: str | None = None
    user_id: str
    title: str
    body: str
    notification_type: str = "employee_reminder"
    payload: dict[str, Any] = Field(default_factory=dict)
    read_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)


class DevicePushToken(BaseModel):
    """Registered device token for push delivery."""

    id: str | None = None
    user_id: str
    expo_push_token: str
    platform: str = "unknown"
    active: bool = True
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def sanitized_token(self) -> str | None:
        """Trimmed token if it looks like an Expo token, else None."""
        token = (self.expo_push_token or "").strip()
        if not token or not token.startswith(EXPO_TOKEN_PREFIXES):
            return None
        return token
