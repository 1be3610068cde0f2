"""
SQLite implementation of reminder storage.

Handles reminder threads, their immutable events and order-driven
resolution. The partial unique index on active threads plus conditional
updates keep at most one active thread per (employee, location).
"""

from datetime import datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.reminder import (
    DeliveryChannel,
    ReminderDeliveryLogEntry,
    ReminderEvent,
    ReminderEventType,
    ReminderStatus,
    ReminderThread,
)
from src.core.exceptions import ConcurrentReminderUpdateError, DatabaseError
from src.core.interfaces.storage import IReminderStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import (
    from_db_time,
    from_json,
    new_id,
    to_db_time,
    to_json,
)

logger = get_logger(__name__)


class SQLiteReminderStore(IReminderStore):
    """SQLite implementation of reminder storage."""

    async def get_thread(self, reminder_id: str) -> ReminderThread | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM reminders WHERE id = ?", (reminder_id,))
            row = await cursor.fetchone()
            return self._row_to_thread(row) if row else None

    async def find_active_threads(
        self, employee_id: str, location_id: str | None
    ) -> list[ReminderThread]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM reminders
                WHERE employee_id = ?
                  AND COALESCE(location_id, '') = ?
                  AND status = 'active'
                ORDER BY created_at DESC
                """,
                (employee_id, location_id or ""),
            )
            rows = await cursor.fetchall()
            return [self._row_to_thread(row) for row in rows]

    async def find_latest_thread(
        self,
        employee_id: str,
        location_id: str | None,
        include_resolved: bool = False,
    ) -> ReminderThread | None:
        status_clause = "" if include_resolved else "AND status <> 'resolved'"
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM reminders
                WHERE employee_id = ?
                  AND COALESCE(location_id, '') = ?
                  {status_clause}
                ORDER BY last_reminded_at DESC
                LIMIT 1
                """,
                (employee_id, location_id or ""),
            )
            row = await cursor.fetchone()
            return self._row_to_thread(row) if row else None

    async def list_active_threads(self, employee_ids: list[str]) -> list[ReminderThread]:
        if not employee_ids:
            return []
        placeholders = ", ".join("?" for _ in employee_ids)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM reminders
                WHERE employee_id IN ({placeholders}) AND status = 'active'
                ORDER BY created_at DESC
                """,
                employee_ids,
            )
            rows = await cursor.fetchall()
            return [self._row_to_thread(row) for row in rows]

    async def create_thread(self, thread: ReminderThread) -> ReminderThread:
        thread = thread.model_copy(update={"id": thread.id or new_id()})
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO reminders (
                        id, employee_id, manager_id, location_id, status,
                        created_at, last_reminded_at, reminder_count
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        thread.id,
                        thread.employee_id,
                        thread.manager_id,
                        thread.location_id,
                        thread.status.value,
                        to_db_time(thread.created_at),
                        to_db_time(thread.last_reminded_at),
                        thread.reminder_count,
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                logger.warning(
                    "reminder_thread_insert_conflict",
                    employee_id=thread.employee_id,
                    location_id=thread.location_id,
                )
                raise ConcurrentReminderUpdateError(thread.employee_id, thread.location_id) from e
            raise DatabaseError("create_thread", str(e)) from e

        logger.info(
            "reminder_thread_created",
            reminder_id=thread.id,
            employee_id=thread.employee_id,
            location_id=thread.location_id,
        )
        return thread

    async def increment_thread(
        self,
        thread: ReminderThread,
        manager_id: str | None,
        reminded_at: datetime,
    ) -> ReminderThread:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE reminders SET
                    reminder_count = reminder_count + 1,
                    last_reminded_at = ?,
                    manager_id = ?
                WHERE id = ? AND status = 'active' AND reminder_count = ?
                """,
                (to_db_time(reminded_at), manager_id, thread.id, thread.reminder_count),
            )
            if cursor.rowcount == 0:
                logger.warning(
                    "reminder_thread_update_conflict",
                    reminder_id=thread.id,
                    expected_count=thread.reminder_count,
                )
                raise ConcurrentReminderUpdateError(thread.employee_id, thread.location_id)

        logger.info(
            "reminder_thread_incremented",
            reminder_id=thread.id,
            reminder_count=thread.reminder_count + 1,
        )
        return thread.model_copy(
            update={
                "reminder_count": thread.reminder_count + 1,
                "last_reminded_at": reminded_at,
                "manager_id": manager_id,
            }
        )

    async def resolve_active_for_employee(
        self,
        employee_id: str,
        order_created_at: datetime,
        order_id: str | None,
    ) -> list[str]:
        resolved_at = to_db_time(order_created_at)
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    SELECT id FROM reminders
                    WHERE employee_id = ?
                      AND status = 'active'
                      AND created_at <= ?
                    """,
                    (employee_id, resolved_at),
                )
                ids = [row["id"] for row in await cursor.fetchall()]
                if not ids:
                    return []

                placeholders = ", ".join("?" for _ in ids)
                await conn.execute(
                    f"""
                    UPDATE reminders SET status = 'resolved', resolved_at = ?
                    WHERE id IN ({placeholders}) AND status = 'active'
                    """,
                    (resolved_at, *ids),
                )
                await conn.executemany(
                    """
                    INSERT INTO reminder_events (
                        id, reminder_id, event_type, sent_at,
                        channels_attempted, delivery_result
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            new_id(),
                            reminder_id,
                            ReminderEventType.AUTO_RESOLVED.value,
                            resolved_at,
                            "[]",
                            to_json({
                                "resolved_by": "order",
                                "order_id": order_id,
                                "resolved_at": resolved_at,
                            }),
                        )
                        for reminder_id in ids
                    ],
                )
        except aiosqlite.Error as e:
            raise DatabaseError("resolve_active_for_employee", str(e)) from e

        logger.info(
            "reminders_auto_resolved",
            employee_id=employee_id,
            order_id=order_id,
            count=len(ids),
        )
        return ids

    async def add_event(self, event: ReminderEvent) -> ReminderEvent:
        event = event.model_copy(update={"id": event.id or new_id()})
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO reminder_events (
                    id, reminder_id, event_type, sent_at,
                    channels_attempted, delivery_result
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    event.id,
                    event.reminder_id,
                    event.event_type.value,
                    to_db_time(event.sent_at),
                    to_json([c.value for c in event.channels_attempted]),
                    to_json(event.delivery_result),
                ),
            )
        return event

    async def list_events_for_thread(self, reminder_id: str) -> list[ReminderEvent]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM reminder_events WHERE reminder_id = ? ORDER BY sent_at ASC",
                (reminder_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_event(row) for row in rows]

    async def list_recent_events(self, limit: int = 50) -> list[ReminderDeliveryLogEntry]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT
                    e.*,
                    r.employee_id AS employee_id,
                    r.manager_id AS manager_id,
                    r.location_id AS location_id,
                    COALESCE(u.name, u.email) AS employee_name
                FROM reminder_events e
                JOIN reminders r ON r.id = e.reminder_id
                LEFT JOIN users u ON u.id = r.employee_id
                ORDER BY e.sent_at DESC
                LIMIT ?
                """,
                (max(1, limit),),
            )
            rows = await cursor.fetchall()
            return [
                ReminderDeliveryLogEntry(
                    event=self._row_to_event(row),
                    employee_id=row["employee_id"],
                    manager_id=row["manager_id"],
                    location_id=row["location_id"],
                    employee_name=row["employee_name"],
                )
                for row in rows
            ]

    @staticmethod
    def _row_to_thread(row: aiosqlite.Row) -> ReminderThread:
        return ReminderThread(
            id=row["id"],
            employee_id=row["employee_id"],
            manager_id=row["manager_id"],
            location_id=row["location_id"],
            status=ReminderStatus(row["status"]),
            created_at=from_db_time(row["created_at"]),
            last_reminded_at=from_db_time(row["last_reminded_at"]) or from_db_time(row["created_at"]),
            reminder_count=max(1, int(row["reminder_count"] or 1)),
            resolved_at=from_db_time(row["resolved_at"]),
            cancelled_at=from_db_time(row["cancelled_at"]),
        )

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> ReminderEvent:
        channels = [
            DeliveryChannel(value)
            for value in from_json(row["channels_attempted"], [])
            if value in {c.value for c in DeliveryChannel}
        ]
        return ReminderEvent(
            id=row["id"],
            reminder_id=row["reminder_id"],
            event_type=ReminderEventType(row["event_type"]),
            sent_at=from_db_time(row["sent_at"]),
            channels_attempted=channels,
            delivery_result=from_json(row["delivery_result"], {}),
        )
