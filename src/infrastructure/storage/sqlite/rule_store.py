"""SQLite implementation of recurring reminder rule storage."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.reminder import ChannelConfig
from src.core.entities.rule import (
    DEFAULT_RULE_TIMEZONE,
    ConditionType,
    RecurringReminderRule,
    RuleScope,
)
from src.core.exceptions import DatabaseError, RuleNotFoundError
from src.core.interfaces.storage import IRecurringRuleStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import (
    from_db_time,
    from_json,
    new_id,
    to_db_time,
    to_json,
)

logger = get_logger(__name__)


class SQLiteRecurringRuleStore(IRecurringRuleStore):
    """SQLite implementation of recurring rule storage."""

    async def get_rule(self, rule_id: str) -> RecurringReminderRule | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM recurring_reminder_rules WHERE id = ?", (rule_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_entity(row) if row else None

    async def list_rules(self) -> list[RecurringReminderRule]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM recurring_reminder_rules ORDER BY created_at DESC"
            )
            rows = await cursor.fetchall()
            return [self._row_to_entity(row) for row in rows]

    async def list_enabled_rules(self) -> list[RecurringReminderRule]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM recurring_reminder_rules
                WHERE enabled = 1
                ORDER BY created_at ASC
                """
            )
            rows = await cursor.fetchall()
            return [self._row_to_entity(row) for row in rows]

    async def upsert_rule(self, rule: RecurringReminderRule) -> RecurringReminderRule:
        """Insert, or replace the definition of an existing rule keeping its history."""
        now = datetime.now(UTC)
        rule_id = rule.id or new_id()
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO recurring_reminder_rules (
                        id, scope, employee_id, location_id, days_of_week,
                        time_of_day, timezone, condition_type, condition_value,
                        quiet_hours_enabled, quiet_hours_start, quiet_hours_end,
                        channels, enabled, created_by, last_triggered_at,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        scope = excluded.scope,
                        employee_id = excluded.employee_id,
                        location_id = excluded.location_id,
                        days_of_week = excluded.days_of_week,
                        time_of_day = excluded.time_of_day,
                        timezone = excluded.timezone,
                        condition_type = excluded.condition_type,
                        condition_value = excluded.condition_value,
                        quiet_hours_enabled = excluded.quiet_hours_enabled,
                        quiet_hours_start = excluded.quiet_hours_start,
                        quiet_hours_end = excluded.quiet_hours_end,
                        channels = excluded.channels,
                        enabled = excluded.enabled,
                        updated_at = excluded.updated_at
                    """,
                    (
                        rule_id,
                        rule.scope.value,
                        rule.employee_id,
                        rule.location_id,
                        to_json(sorted(set(rule.days_of_week))),
                        rule.time_of_day,
                        rule.timezone,
                        rule.condition_type.value,
                        rule.condition_value,
                        1 if rule.quiet_hours_enabled else 0,
                        rule.quiet_hours_start,
                        rule.quiet_hours_end,
                        to_json(rule.channels.model_dump()),
                        1 if rule.enabled else 0,
                        rule.created_by,
                        to_db_time(rule.last_triggered_at),
                        to_db_time(rule.created_at),
                        to_db_time(now),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("upsert_rule", str(e)) from e

        logger.info("recurring_rule_saved", rule_id=rule_id, scope=rule.scope.value)
        saved = await self.get_rule(rule_id)
        if saved is None:
            raise RuleNotFoundError(rule_id)
        return saved

    async def delete_rule(self, rule_id: str) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM recurring_reminder_rules WHERE id = ?", (rule_id,)
            )
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("recurring_rule_deleted", rule_id=rule_id)
        return deleted

    async def mark_triggered(self, rule_id: str, triggered_at: datetime) -> None:
        async with get_transaction() as conn:
            await conn.execute(
                "UPDATE recurring_reminder_rules SET last_triggered_at = ? WHERE id = ?",
                (to_db_time(triggered_at), rule_id),
            )

    @staticmethod
    def _row_to_entity(row: aiosqlite.Row) -> RecurringReminderRule:
        days = [int(d) for d in from_json(row["days_of_week"], []) if str(d).lstrip("-").isdigit()]
        return RecurringReminderRule(
            id=row["id"],
            scope=RuleScope(row["scope"]),
            employee_id=row["employee_id"],
            location_id=row["location_id"],
            days_of_week=days,
            time_of_day=row["time_of_day"],
            timezone=row["timezone"] or DEFAULT_RULE_TIMEZONE,
            condition_type=ConditionType(row["condition_type"]),
            condition_value=row["condition_value"],
            quiet_hours_enabled=bool(row["quiet_hours_enabled"]),
            quiet_hours_start=row["quiet_hours_start"],
            quiet_hours_end=row["quiet_hours_end"],
            channels=ChannelConfig.from_raw(from_json(row["channels"], {})),
            enabled=bool(row["enabled"]),
            created_by=row["created_by"],
            last_triggered_at=from_db_time(row["last_triggered_at"]),
            created_at=from_db_time(row["created_at"]),
            updated_at=from_db_time(row["updated_at"]),
        )
