"""Tests for recurring rule validation."""

import pytest

from src.core.entities import ConditionType, RuleScope
from src.core.exceptions import InvalidTimeOfDayError, InvalidTimezoneError, RuleValidationError
from src.core.services.rule_validation import validate_rule
from tests.factories import make_rule


def test_valid_location_rule():
    validate_rule(make_rule(), 15)


def test_valid_employee_rule():
    validate_rule(make_rule(scope=RuleScope.EMPLOYEE, employee_id="emp-1", location_id=None), 15)


class TestScope:
    def test_employee_scope_needs_employee(self):
        with pytest.raises(RuleValidationError) as exc_info:
            validate_rule(make_rule(scope=RuleScope.EMPLOYEE, location_id=None), 15)
        assert exc_info.value.code == "INVALID_RULE"

    def test_employee_scope_rejects_location(self):
        with pytest.raises(RuleValidationError):
            validate_rule(make_rule(scope=RuleScope.EMPLOYEE, employee_id="emp-1"), 15)

    def test_location_scope_rejects_employee(self):
        with pytest.raises(RuleValidationError):
            validate_rule(make_rule(employee_id="emp-1"), 15)


class TestDays:
    def test_empty_days(self):
        with pytest.raises(RuleValidationError):
            validate_rule(make_rule(days_of_week=[]), 15)

    def test_out_of_range_day(self):
        with pytest.raises(RuleValidationError):
            validate_rule(make_rule(days_of_week=[1, 7]), 15)


class TestCondition:
    def test_days_since_needs_value(self):
        with pytest.raises(RuleValidationError):
            validate_rule(make_rule(condition_type=ConditionType.DAYS_SINCE_LAST_ORDER_GTE), 15)

    def test_days_since_rejects_negative(self):
        rule = make_rule(condition_type=ConditionType.DAYS_SINCE_LAST_ORDER_GTE, condition_value=-1)
        with pytest.raises(RuleValidationError):
            validate_rule(rule, 15)

    def test_no_order_today_takes_no_value(self):
        with pytest.raises(RuleValidationError):
            validate_rule(make_rule(condition_value=2), 15)


def test_bad_time_of_day():
    with pytest.raises(InvalidTimeOfDayError):
        validate_rule(make_rule(time_of_day="9am"), 15)


def test_bad_timezone():
    with pytest.raises(InvalidTimezoneError):
        validate_rule(make_rule(timezone="Atlantis/Capital"), 15)


def test_bad_quiet_hours_when_enabled():
    rule = make_rule(quiet_hours_enabled=True, quiet_hours_start="22:00", quiet_hours_end="late")
    with pytest.raises(InvalidTimeOfDayError):
        validate_rule(rule, 15)


def test_window_crossing_midnight_is_rejected():
    with pytest.raises(RuleValidationError) as exc_info:
        validate_rule(make_rule(time_of_day="23:30"), 60)
    assert exc_info.value.details["field"] == "time_of_day"
