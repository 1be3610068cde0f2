"""Tests for domain exceptions."""

from src.core.exceptions import (
    ConcurrentReminderUpdateError,
    DatabaseError,
    EmployeeSuspendedError,
    ForbiddenError,
    InvalidTimezoneError,
    PushGatewayError,
    RateLimitedError,
    ReminderEngineError,
    RuleNotFoundError,
    StorageError,
    ValidationError,
)


class TestReminderEngineError:
    def test_code_defaults_to_class_name(self):
        error = ReminderEngineError("boom")
        assert error.code == "ReminderEngineError"
        assert error.details == {}

    def test_to_dict(self):
        error = RuleNotFoundError("rule-9")
        assert error.to_dict() == {
            "error": "RULE_NOT_FOUND",
            "message": "Recurring reminder rule not found: rule-9",
            "details": {"rule_id": "rule-9"},
        }


def test_database_error_is_storage_error():
    error = DatabaseError("insert", "disk full")
    assert isinstance(error, StorageError)
    assert error.details == {"operation": "insert", "error": "disk full"}


def test_validation_subclasses_keep_their_codes():
    assert InvalidTimezoneError("X/Y").code == "INVALID_TIMEZONE"
    suspended = EmployeeSuspendedError("emp-1")
    assert isinstance(suspended, ValidationError)
    assert suspended.code == "EMPLOYEE_SUSPENDED"


def test_validation_value_is_truncated():
    error = ValidationError("message", "too long", "x" * 500)
    assert len(error.details["value"]) == 100


def test_rate_limited_message_rounds_minutes_up():
    error = RateLimitedError(retry_after_seconds=61, limit_minutes=15)
    assert "2 minute(s)" in error.message
    assert error.retry_after_seconds == 61
    assert error.details["limit_minutes"] == 15


def test_concurrent_update_details():
    error = ConcurrentReminderUpdateError("emp-1", None)
    assert error.details == {"employee_id": "emp-1", "location_id": None}


def test_forbidden_and_push_errors():
    assert ForbiddenError("nope", "u1").details == {"user_id": "u1"}
    assert PushGatewayError("timeout").details["status_code"] is None
