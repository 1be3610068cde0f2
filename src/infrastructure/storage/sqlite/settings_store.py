"""SQLite implementation of the reminder settings row."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.settings import ReminderSettingsPatch, ReminderSystemSettings
from src.core.interfaces.storage import IReminderSettingsStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import from_db_time, to_db_time

logger = get_logger(__name__)


class SQLiteReminderSettingsStore(IReminderSettingsStore):
    """SQLite implementation of reminder settings storage."""

    async def get_settings(self, org_id: str) -> ReminderSystemSettings | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM reminder_system_settings WHERE org_id = ?", (org_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_entity(row) if row else None

    async def update_settings(
        self, org_id: str, patch: ReminderSettingsPatch
    ) -> ReminderSystemSettings:
        changes = patch.model_dump(exclude_none=True)
        now = to_db_time(datetime.now(UTC))
        async with get_transaction() as conn:
            await conn.execute(
                "INSERT OR IGNORE INTO reminder_system_settings (org_id) VALUES (?)",
                (org_id,),
            )
            if changes:
                assignments = ", ".join(f"{column} = ?" for column in changes)
                await conn.execute(
                    f"""
                    UPDATE reminder_system_settings
                    SET {assignments}, updated_at = ?
                    WHERE org_id = ?
                    """,
                    (*changes.values(), now, org_id),
                )
            cursor = await conn.execute(
                "SELECT * FROM reminder_system_settings WHERE org_id = ?", (org_id,)
            )
            row = await cursor.fetchone()

        logger.info("reminder_settings_updated", org_id=org_id, fields=sorted(changes))
        return self._row_to_entity(row)

    @staticmethod
    def _row_to_entity(row: aiosqlite.Row) -> ReminderSystemSettings:
        return ReminderSystemSettings(
            org_id=row["org_id"],
            overdue_threshold_days=row["overdue_threshold_days"],
            reminder_rate_limit_minutes=row["reminder_rate_limit_minutes"],
            recurring_window_minutes=row["recurring_window_minutes"],
            updated_at=from_db_time(row["updated_at"]),
        )
