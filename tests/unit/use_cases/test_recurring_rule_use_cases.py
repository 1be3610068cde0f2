"""Tests for recurring rule management use cases."""

from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import UpsertRecurringRuleRequest
from src.application.use_cases import (
    DeleteRecurringRuleUseCase,
    ListRecurringRulesUseCase,
    UpsertRecurringRuleUseCase,
)
from src.core.entities import EmployeeRole, ReminderSystemSettings, Requester, RuleScope
from src.core.exceptions import RuleNotFoundError, RuleValidationError
from tests.factories import ORG_ID, WEDNESDAY_9AM_LA as NOW
from tests.factories import make_rule

MANAGER = Requester(user_id="mgr-1", role=EmployeeRole.MANAGER)


@pytest.fixture
def rule_store():
    store = AsyncMock()
    store.upsert_rule.side_effect = lambda rule: rule.model_copy(update={"id": rule.id or "rule-new"})
    return store


@pytest.fixture
def settings_store():
    store = AsyncMock()
    store.get_settings.return_value = ReminderSystemSettings(org_id=ORG_ID)
    return store


def _request(**overrides) -> UpsertRecurringRuleRequest:
    values = {
        "scope": RuleScope.LOCATION,
        "location_id": "loc-1",
        "days_of_week": [5, 1, 1],
        "time_of_day": " 09:00 ",
    }
    values.update(overrides)
    return UpsertRecurringRuleRequest(**values)


class TestUpsertRecurringRuleUseCase:
    async def test_create_normalizes_and_records_creator(self, rule_store, settings_store):
        use_case = UpsertRecurringRuleUseCase(rule_store, settings_store)

        saved = await use_case.execute(_request(), MANAGER)

        assert saved.id == "rule-new"
        assert saved.days_of_week == [1, 5]
        assert saved.time_of_day == "09:00"
        assert saved.created_by == "mgr-1"
        rule_store.get_rule.assert_not_called()

    async def test_update_keeps_history(self, rule_store, settings_store):
        existing = make_rule(created_by="mgr-0", last_triggered_at=NOW, created_at=NOW)
        rule_store.get_rule.return_value = existing
        use_case = UpsertRecurringRuleUseCase(rule_store, settings_store)

        saved = await use_case.execute(_request(id="rule-1", time_of_day="10:00"), MANAGER)

        assert saved.created_by == "mgr-0"
        assert saved.last_triggered_at == NOW
        assert saved.created_at == NOW
        assert saved.time_of_day == "10:00"

    async def test_unknown_id(self, rule_store, settings_store):
        rule_store.get_rule.return_value = None
        with pytest.raises(RuleNotFoundError):
            await UpsertRecurringRuleUseCase(rule_store, settings_store).execute(
                _request(id="missing"), MANAGER
            )

    async def test_window_uses_org_setting(self, rule_store, settings_store):
        settings_store.get_settings.return_value = ReminderSystemSettings(
            org_id=ORG_ID, recurring_window_minutes=90
        )
        with pytest.raises(RuleValidationError):
            await UpsertRecurringRuleUseCase(rule_store, settings_store).execute(
                _request(time_of_day="23:00"), MANAGER
            )
        rule_store.upsert_rule.assert_not_called()


class TestListAndDelete:
    async def test_list(self, rule_store):
        rule_store.list_rules.return_value = [make_rule(), make_rule(id="rule-2")]
        use_case = ListRecurringRulesUseCase(rule_store)

        response = use_case.to_response(await use_case.execute(MANAGER))

        assert response.total == 2
        assert response.rules[0].scope == "location"

    async def test_delete_missing(self, rule_store):
        rule_store.delete_rule.return_value = False
        with pytest.raises(RuleNotFoundError):
            await DeleteRecurringRuleUseCase(rule_store).execute("rule-9", MANAGER)

    async def test_delete(self, rule_store):
        rule_store.delete_rule.return_value = True
        await DeleteRecurringRuleUseCase(rule_store).execute("rule-1", MANAGER)
        rule_store.delete_rule.assert_awaited_once_with("rule-1")
