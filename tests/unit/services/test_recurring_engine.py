"""Tests for RecurringRuleEngine error isolation with mocked collaborators."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.entities import Employee, RuleScope
from src.core.exceptions import InAppDeliveryError
from src.core.services.rate_limiter import RateLimitDecision
from src.core.services.recurring_engine import RecurringRuleEngine
from tests.factories import WEDNESDAY_9AM_LA as NOW
from tests.factories import make_rule


@pytest.fixture
def rule_store():
    return AsyncMock()


@pytest.fixture
def employee_store():
    store = AsyncMock()
    store.list_employees.return_value = [
        Employee(id="emp-1", default_location_id="loc-1"),
        Employee(id="emp-2", default_location_id="loc-1"),
    ]
    return store


@pytest.fixture
def order_store():
    store = AsyncMock()
    store.get_latest_orders.return_value = {}
    return store


@pytest.fixture
def sender():
    sender = AsyncMock()
    sender.preview.return_value = RateLimitDecision(allowed=True)
    return sender


@pytest.fixture
def engine(rule_store, employee_store, order_store, sender):
    return RecurringRuleEngine(rule_store, employee_store, order_store, sender, max_concurrent_dispatches=1)


async def test_invalid_rule_is_reported_and_pass_continues(engine, rule_store, sender, settings):
    rule_store.list_enabled_rules.return_value = [
        make_rule(id="bad", timezone="Not/AZone"),
        make_rule(id="good"),
    ]

    result = await engine.evaluate(settings, now=NOW)

    assert result.evaluated_rules == 2
    assert result.due_rules == 1
    assert result.reminders_sent == 2
    assert result.errors == [{"rule_id": "bad", "message": "Validation error for 'timezone': Unknown IANA timezone"}]
    rule_store.mark_triggered.assert_awaited_once_with("good", NOW)


async def test_candidate_failure_is_isolated(engine, rule_store, sender, settings):
    rule_store.list_enabled_rules.return_value = [make_rule()]
    sender.send.side_effect = [InAppDeliveryError("rem-1", "disk full"), MagicMock(warnings=[])]

    result = await engine.evaluate(settings, now=NOW)

    assert result.reminders_sent == 1
    assert result.errors[0]["employee_id"] == "emp-1"
    assert "disk full" in result.errors[0]["message"]
    rule_store.mark_triggered.assert_awaited_once()


async def test_dry_run_uses_preview(engine, rule_store, sender, settings):
    rule_store.list_enabled_rules.return_value = [make_rule()]
    sender.preview.side_effect = [
        RateLimitDecision(allowed=False, retry_after_seconds=60),
        RateLimitDecision(allowed=True),
    ]

    result = await engine.evaluate(settings, now=NOW, dry_run=True)

    assert result.reminders_sent == 1
    assert result.skipped_by_rate_limit == 1
    sender.send.assert_not_called()
    rule_store.mark_triggered.assert_not_called()


async def test_employee_rule_skips_missing_employee(engine, rule_store, employee_store, settings):
    employee_store.get_employee.return_value = None
    rule_store.list_enabled_rules.return_value = [
        make_rule(scope=RuleScope.EMPLOYEE, employee_id="gone", location_id=None)
    ]

    result = await engine.evaluate(settings, now=NOW)

    assert result.due_rules == 1
    assert result.reminders_sent == 0
