"""
Evaluate Recurring Rules Use Case.

Entry point for the cron caller (service token) and for managers.
"""

from src.application.dto.requests import EvaluateRecurringRulesRequest
from src.application.dto.responses import RecurringEvaluationResponse
from src.application.use_cases.reminder_settings import load_reminder_settings
from src.config import get_logger
from src.core.entities.employee import Requester
from src.core.interfaces.storage import IReminderSettingsStore
from src.core.services.access import ensure_manager
from src.core.services.recurring_engine import RecurringEvaluationResult, RecurringRuleEngine

logger = get_logger(__name__)


class EvaluateRecurringRulesUseCase:
    """Run one pass of the recurring rule engine."""

    def __init__(
        self,
        engine: RecurringRuleEngine | None = None,
        settings_store: IReminderSettingsStore | None = None,
    ):
        self._engine = engine
        self._settings_store = settings_store

    async def _get_engine(self) -> RecurringRuleEngine:
        if self._engine is None:
            from src.application.services import get_recurring_engine

            self._engine = await get_recurring_engine()
        return self._engine

    async def _get_settings_store(self) -> IReminderSettingsStore:
        if self._settings_store is None:
            from src.infrastructure.storage.sqlite import get_settings_store

            self._settings_store = await get_settings_store()
        return self._settings_store

    async def execute(
        self,
        request: EvaluateRecurringRulesRequest,
        requester: Requester | None = None,
        service_call: bool = False,
    ) -> RecurringEvaluationResult:
        """
        Args:
            request: Pass options
            requester: Calling manager, if any
            service_call: Caller presented the service token; no actor is recorded
        """
        actor_id = None
        if not service_call:
            actor_id = ensure_manager(requester).user_id

        settings = await load_reminder_settings(await self._get_settings_store())
        engine = await self._get_engine()
        return await engine.evaluate(settings, dry_run=request.dry_run, actor_id=actor_id)

    def to_response(self, result: RecurringEvaluationResult) -> RecurringEvaluationResponse:
        """Convert result to API response."""
        return RecurringEvaluationResponse(
            evaluated_rules=result.evaluated_rules,
            due_rules=result.due_rules,
            reminders_sent=result.reminders_sent,
            skipped_by_condition=result.skipped_by_condition,
            skipped_by_rate_limit=result.skipped_by_rate_limit,
            skipped_by_quiet_hours=result.skipped_by_quiet_hours,
            errors=result.errors,
            warnings=result.warnings,
            dry_run=result.dry_run,
            evaluated_at=result.evaluated_at,
        )
