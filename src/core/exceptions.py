"""
Domain exceptions for the reminder engine.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class ReminderEngineError(Exception):
    """Base exception for all reminder engine errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(ReminderEngineError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class EmployeeNotFoundError(StorageError):
    """Employee does not exist or is not an employee account."""

    def __init__(self, employee_id: str):
        super().__init__(
            f"Employee not found: {employee_id}",
            code="EMPLOYEE_NOT_FOUND",
            details={"employee_id": employee_id},
        )


class RuleNotFoundError(StorageError):
    """Recurring reminder rule not found."""

    def __init__(self, rule_id: str):
        super().__init__(
            f"Recurring reminder rule not found: {rule_id}",
            code="RULE_NOT_FOUND",
            details={"rule_id": rule_id},
        )


class SettingsNotFoundError(StorageError):
    """Reminder settings row is missing for the organisation."""

    def __init__(self, org_id: str):
        super().__init__(
            f"Reminder settings not found for org: {org_id}",
            code="SETTINGS_NOT_FOUND",
            details={"org_id": org_id},
        )


class ConcurrentReminderUpdateError(StorageError):
    """Another writer changed the reminder thread between read and write."""

    def __init__(self, employee_id: str, location_id: str | None):
        super().__init__(
            "Reminder thread was modified concurrently; the other send won",
            code="CONCURRENT_REMINDER_UPDATE",
            details={"employee_id": employee_id, "location_id": location_id},
        )


# Authorization Exceptions
class AuthorizationError(ReminderEngineError):
    """Base exception for caller authorization."""

    pass


class UnauthorizedError(AuthorizationError):
    """Caller is not authenticated."""

    def __init__(self, reason: str = "Missing or invalid credentials"):
        super().__init__(reason, code="UNAUTHORIZED")


class ForbiddenError(AuthorizationError):
    """Caller is authenticated but not allowed to perform the action."""

    def __init__(self, reason: str, user_id: str | None = None):
        super().__init__(
            reason,
            code="FORBIDDEN",
            details={"user_id": user_id},
        )


# Validation Exceptions
class ValidationError(ReminderEngineError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidTimeOfDayError(ValidationError):
    """Time string is not a valid HH:MM value."""

    def __init__(self, field: str, value: Any):
        super().__init__(field=field, message="Expected HH:MM (00:00-23:59)", value=value)
        self.code = "INVALID_TIME_OF_DAY"


class InvalidTimezoneError(ValidationError):
    """Timezone name is not a known IANA zone."""

    def __init__(self, value: Any):
        super().__init__(field="timezone", message="Unknown IANA timezone", value=value)
        self.code = "INVALID_TIMEZONE"


class RuleValidationError(ValidationError):
    """Recurring rule definition is inconsistent."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(field=field, message=message, value=value)
        self.code = "INVALID_RULE"


class EmployeeSuspendedError(ValidationError):
    """Suspended employees cannot receive reminders."""

    def __init__(self, employee_id: str):
        super().__init__(
            field="employee_id",
            message="Cannot remind suspended employees",
            value=employee_id,
        )
        self.code = "EMPLOYEE_SUSPENDED"


# Rate limiting
class RateLimitedError(ReminderEngineError):
    """Reminder was sent too recently for this thread."""

    def __init__(self, retry_after_seconds: int, limit_minutes: int):
        wait_minutes = max(1, -(-retry_after_seconds // 60))
        super().__init__(
            f"Reminder was sent recently. Try again in {wait_minutes} minute(s).",
            code="RATE_LIMITED",
            details={
                "retry_after_seconds": retry_after_seconds,
                "limit_minutes": limit_minutes,
            },
        )
        self.retry_after_seconds = retry_after_seconds


# Delivery Exceptions
class DeliveryError(ReminderEngineError):
    """Base exception for notification delivery."""

    pass


class InAppDeliveryError(DeliveryError):
    """In-app notification row could not be written."""

    def __init__(self, reminder_id: str, reason: str):
        super().__init__(
            f"Failed to create in-app notification: {reason}",
            code="IN_APP_DELIVERY_FAILED",
            details={"reminder_id": reminder_id, "reason": reason},
        )


class PushGatewayError(DeliveryError):
    """Push gateway could not be reached or answered with a transport error."""

    def __init__(self, reason: str, status_code: int | None = None):
        super().__init__(
            f"Push gateway error: {reason}",
            code="PUSH_GATEWAY_ERROR",
            details={"reason": reason, "status_code": status_code},
        )


class ConfigurationError(ReminderEngineError):
    """Configuration error."""

    pass
