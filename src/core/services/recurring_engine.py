"""
Recurring Rule Engine.

One evaluation pass over every enabled rule. Each rule is isolated: a bad
rule or a failing employee is recorded and the pass continues.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from src.config import get_logger
from src.core.entities.employee import Employee, EmployeeRole
from src.core.entities.order import Order
from src.core.entities.reminder import ReminderSource
from src.core.entities.rule import RecurringReminderRule, RuleScope
from src.core.entities.settings import ReminderSystemSettings
from src.core.exceptions import RateLimitedError, ValidationError
from src.core.interfaces.storage import IEmployeeStore, IOrderStore, IRecurringRuleStore
from src.core.services.conditions import employee_qualifies
from src.core.services.reminder_sender import ReminderSender, SendReminderCommand
from src.core.services.schedule import (
    date_key,
    is_in_quiet_hours,
    is_rule_due_now,
    local_clock,
    resolve_timezone,
)

logger = get_logger(__name__)


class CandidateOutcome(str, Enum):
    CONDITION_NOT_MET = "condition_not_met"
    RATE_LIMITED = "rate_limited"
    DISPATCHED = "dispatched"
    ERROR = "error"


@dataclass
class RecurringEvaluationResult:
    """Summary of one pass."""

    evaluated_rules: int = 0
    due_rules: int = 0
    reminders_sent: int = 0
    skipped_by_condition: int = 0
    skipped_by_rate_limit: int = 0
    skipped_by_quiet_hours: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    dry_run: bool = False
    evaluated_at: datetime | None = None


class RecurringRuleEngine:
    """Evaluates recurring rules against live order activity."""

    def __init__(
        self,
        rule_store: IRecurringRuleStore,
        employee_store: IEmployeeStore,
        order_store: IOrderStore,
        sender: ReminderSender,
        max_concurrent_dispatches: int = 5,
    ) -> None:
        self._rules = rule_store
        self._employees = employee_store
        self._orders = order_store
        self._sender = sender
        self._max_concurrency = max(1, max_concurrent_dispatches)

    async def evaluate(
        self,
        settings: ReminderSystemSettings,
        now: datetime | None = None,
        dry_run: bool = False,
        actor_id: str | None = None,
    ) -> RecurringEvaluationResult:
        now = now or datetime.now(UTC)
        result = RecurringEvaluationResult(dry_run=dry_run, evaluated_at=now)

        rules = await self._rules.list_enabled_rules()
        logger.info("recurring_evaluation_started", rules=len(rules), dry_run=dry_run)

        for rule in rules:
            result.evaluated_rules += 1
            try:
                await self._evaluate_rule(rule, settings, now, dry_run, actor_id, result)
            except ValidationError as e:
                logger.warning("recurring_rule_invalid", rule_id=rule.id, error=e.message)
                result.errors.append({"rule_id": rule.id, "message": e.message})
            except Exception as e:
                logger.exception("recurring_rule_error", rule_id=rule.id, error=str(e))
                result.errors.append({"rule_id": rule.id, "message": str(e)})

        logger.info(
            "recurring_evaluation_completed",
            evaluated_rules=result.evaluated_rules,
            due_rules=result.due_rules,
            reminders_sent=result.reminders_sent,
            skipped_by_condition=result.skipped_by_condition,
            skipped_by_rate_limit=result.skipped_by_rate_limit,
            errors=len(result.errors),
            dry_run=dry_run,
        )
        return result

    async def _evaluate_rule(
        self,
        rule: RecurringReminderRule,
        settings: ReminderSystemSettings,
        now: datetime,
        dry_run: bool,
        actor_id: str | None,
        result: RecurringEvaluationResult,
    ) -> None:
        if not is_rule_due_now(rule, settings, now):
            return

        if is_in_quiet_hours(rule, now):
            result.skipped_by_quiet_hours += 1
            logger.info("recurring_rule_quiet_hours", rule_id=rule.id)
            return

        result.due_rules += 1

        candidates = await self.expand_candidates(rule)
        latest_orders = await self._orders.get_latest_orders([c.id for c in candidates])
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run(employee: Employee) -> CandidateOutcome:
            async with semaphore:
                return await self._process_candidate(
                    rule,
                    employee,
                    latest_orders.get(employee.id),
                    settings,
                    now,
                    dry_run,
                    actor_id,
                    result,
                )

        outcomes = await asyncio.gather(*(run(c) for c in candidates))
        for outcome in outcomes:
            if outcome == CandidateOutcome.DISPATCHED:
                result.reminders_sent += 1
            elif outcome == CandidateOutcome.CONDITION_NOT_MET:
                result.skipped_by_condition += 1
            elif outcome == CandidateOutcome.RATE_LIMITED:
                result.skipped_by_rate_limit += 1

        if not dry_run:
            await self._rules.mark_triggered(rule.id, now)

        logger.info(
            "recurring_rule_processed",
            rule_id=rule.id,
            candidates=len(candidates),
            dry_run=dry_run,
        )

    async def expand_candidates(self, rule: RecurringReminderRule) -> list[Employee]:
        """Employees a rule targets right now: present, role employee, not suspended."""
        if rule.scope == RuleScope.EMPLOYEE:
            if not rule.employee_id:
                return []
            employee = await self._employees.get_employee(rule.employee_id)
            return [employee] if employee is not None and employee.is_remindable else []

        if not rule.location_id:
            return []
        employees = await self._employees.list_employees(
            roles=[EmployeeRole.EMPLOYEE], location_id=rule.location_id
        )
        return [e for e in employees if e.is_remindable]

    async def _process_candidate(
        self,
        rule: RecurringReminderRule,
        employee: Employee,
        latest_order: Order | None,
        settings: ReminderSystemSettings,
        now: datetime,
        dry_run: bool,
        actor_id: str | None,
        result: RecurringEvaluationResult,
    ) -> CandidateOutcome:
        tz = resolve_timezone(rule.timezone)
        today = local_clock(now, tz).date_key
        last_order_key = date_key(latest_order.created_at, tz) if latest_order else None

        if not employee_qualifies(rule.condition_type, rule.condition_value, last_order_key, today):
            return CandidateOutcome.CONDITION_NOT_MET

        location_id = (
            rule.location_id if rule.scope == RuleScope.LOCATION else employee.default_location_id
        )

        try:
            if dry_run:
                decision = await self._sender.preview(employee, location_id, settings, now=now)
                if not decision.allowed:
                    return CandidateOutcome.RATE_LIMITED
                return CandidateOutcome.DISPATCHED

            sent = await self._sender.send(
                SendReminderCommand(
                    employee_id=employee.id,
                    manager_id=rule.created_by or actor_id,
                    location_id=location_id,
                    source=ReminderSource.RECURRING,
                    channels=rule.channels,
                ),
                settings,
                now=now,
                employee=employee,
            )
            result.warnings.extend(sent.warnings)
            return CandidateOutcome.DISPATCHED

        except RateLimitedError:
            return CandidateOutcome.RATE_LIMITED
        except Exception as e:
            logger.error(
                "recurring_reminder_failed",
                rule_id=rule.id,
                employee_id=employee.id,
                error=str(e),
            )
            result.errors.append({
                "rule_id": rule.id,
                "employee_id": employee.id,
                "message": getattr(e, "message", None) or str(e),
            })
            return CandidateOutcome.ERROR
