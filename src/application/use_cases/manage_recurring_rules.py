"""List/Upsert/Delete Recurring Reminder Rule Use Cases."""

from src.application.dto.requests import UpsertRecurringRuleRequest
from src.application.dto.responses import (
    ChannelsResponse,
    RecurringRuleListResponse,
    RecurringRuleResponse,
)
from src.application.use_cases.reminder_settings import load_reminder_settings
from src.config import get_logger
from src.core.entities.employee import Requester
from src.core.entities.reminder import ChannelConfig
from src.core.entities.rule import RecurringReminderRule
from src.core.exceptions import RuleNotFoundError
from src.core.interfaces.storage import IRecurringRuleStore, IReminderSettingsStore
from src.core.services.access import ensure_manager
from src.core.services.rule_validation import validate_rule

logger = get_logger(__name__)


def rule_to_response(rule: RecurringReminderRule) -> RecurringRuleResponse:
    return RecurringRuleResponse(
        id=rule.id or "",
        scope=rule.scope.value,
        employee_id=rule.employee_id,
        location_id=rule.location_id,
        days_of_week=rule.days_of_week,
        time_of_day=rule.time_of_day,
        timezone=rule.timezone,
        condition_type=rule.condition_type.value,
        condition_value=rule.condition_value,
        quiet_hours_enabled=rule.quiet_hours_enabled,
        quiet_hours_start=rule.quiet_hours_start,
        quiet_hours_end=rule.quiet_hours_end,
        channels=ChannelsResponse(push=rule.channels.push, in_app=rule.channels.in_app),
        enabled=rule.enabled,
        created_by=rule.created_by,
        last_triggered_at=rule.last_triggered_at,
        created_at=rule.created_at,
        updated_at=rule.updated_at,
    )


class _RuleUseCase:
    def __init__(
        self,
        rule_store: IRecurringRuleStore | None = None,
        settings_store: IReminderSettingsStore | None = None,
    ):
        self._rule_store = rule_store
        self._settings_store = settings_store

    async def _get_rule_store(self) -> IRecurringRuleStore:
        if self._rule_store is None:
            from src.infrastructure.storage.sqlite import get_rule_store

            self._rule_store = await get_rule_store()
        return self._rule_store

    async def _get_settings_store(self) -> IReminderSettingsStore:
        if self._settings_store is None:
            from src.infrastructure.storage.sqlite import get_settings_store

            self._settings_store = await get_settings_store()
        return self._settings_store


class ListRecurringRulesUseCase(_RuleUseCase):
    """All rules, newest first."""

    async def execute(self, requester: Requester | None) -> list[RecurringReminderRule]:
        ensure_manager(requester)
        return await (await self._get_rule_store()).list_rules()

    def to_response(self, rules: list[RecurringReminderRule]) -> RecurringRuleListResponse:
        return RecurringRuleListResponse(
            rules=[rule_to_response(r) for r in rules],
            total=len(rules),
        )


class UpsertRecurringRuleUseCase(_RuleUseCase):
    """Validate and store a rule."""

    async def execute(
        self,
        request: UpsertRecurringRuleRequest,
        requester: Requester | None,
    ) -> RecurringReminderRule:
        """
        Raises:
            RuleValidationError, InvalidTimeOfDayError, InvalidTimezoneError:
                The definition is inconsistent.
            RuleNotFoundError: ``id`` was given but no such rule exists.
        """
        manager = ensure_manager(requester)
        store = await self._get_rule_store()

        existing = None
        if request.id:
            existing = await store.get_rule(request.id)
            if existing is None:
                raise RuleNotFoundError(request.id)

        rule = RecurringReminderRule(
            id=request.id,
            scope=request.scope,
            employee_id=request.employee_id,
            location_id=request.location_id,
            days_of_week=sorted(set(request.days_of_week)),
            time_of_day=request.time_of_day.strip(),
            timezone=request.timezone,
            condition_type=request.condition_type,
            condition_value=request.condition_value,
            quiet_hours_enabled=request.quiet_hours_enabled,
            quiet_hours_start=request.quiet_hours_start,
            quiet_hours_end=request.quiet_hours_end,
            channels=ChannelConfig(
                push=request.channels.push, in_app=request.channels.in_app
            ),
            enabled=request.enabled,
            created_by=existing.created_by if existing else manager.user_id,
            last_triggered_at=existing.last_triggered_at if existing else None,
        )
        if existing is not None:
            rule = rule.model_copy(update={"created_at": existing.created_at})

        settings = await load_reminder_settings(await self._get_settings_store())
        validate_rule(rule, settings.recurring_window_minutes)

        saved = await store.upsert_rule(rule)
        logger.info(
            "recurring_rule_upserted",
            rule_id=saved.id,
            created=existing is None,
            user_id=manager.user_id,
        )
        return saved


class DeleteRecurringRuleUseCase(_RuleUseCase):
    """Delete a rule by ID."""

    async def execute(self, rule_id: str, requester: Requester | None) -> None:
        """
        Raises:
            RuleNotFoundError: No such rule.
        """
        ensure_manager(requester)
        if not await (await self._get_rule_store()).delete_rule(rule_id):
            raise RuleNotFoundError(rule_id)
