"""SQLite implementation of in-app notifications and device push tokens."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.reminder import DevicePushToken, InAppNotification
from src.core.interfaces.storage import INotificationStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import (
    from_db_time,
    from_json,
    new_id,
    to_db_time,
    to_json,
)

logger = get_logger(__name__)


class SQLiteNotificationStore(INotificationStore):
    """SQLite implementation of notification storage."""

    async def create_notification(self, notification: InAppNotification) -> InAppNotification:
        notification = notification.model_copy(update={"id": notification.id or new_id()})
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO notifications (
                    id, user_id, title, body, notification_type, payload, read_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    notification.id,
                    notification.user_id,
                    notification.title,
                    notification.body,
                    notification.notification_type,
                    to_json(notification.payload),
                    to_db_time(notification.read_at),
                    to_db_time(notification.created_at),
                ),
            )
        return notification

    async def list_notifications(self, user_id: str, limit: int = 50) -> list[InAppNotification]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM notifications
                WHERE user_id = ?
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (user_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_notification(row) for row in rows]

    async def list_active_push_tokens(self, user_id: str) -> list[DevicePushToken]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM device_push_tokens
                WHERE user_id = ? AND active = 1
                ORDER BY updated_at DESC
                """,
                (user_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_token(row) for row in rows]

    async def register_push_token(self, token: DevicePushToken) -> DevicePushToken:
        token = token.model_copy(
            update={"id": token.id or new_id(), "updated_at": datetime.now(UTC)}
        )
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO device_push_tokens (
                    id, user_id, expo_push_token, platform, active, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id, expo_push_token) DO UPDATE SET
                    platform = excluded.platform,
                    active = excluded.active,
                    updated_at = excluded.updated_at
                """,
                (
                    token.id,
                    token.user_id,
                    token.expo_push_token,
                    token.platform,
                    1 if token.active else 0,
                    to_db_time(token.updated_at),
                ),
            )
        logger.info("push_token_registered", user_id=token.user_id, platform=token.platform)
        return token

    @staticmethod
    def _row_to_notification(row: aiosqlite.Row) -> InAppNotification:
        return InAppNotification(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            body=row["body"],
            notification_type=row["notification_type"],
            payload=from_json(row["payload"], {}),
            read_at=from_db_time(row["read_at"]),
            created_at=from_db_time(row["created_at"]),
        )

    @staticmethod
    def _row_to_token(row: aiosqlite.Row) -> DevicePushToken:
        return DevicePushToken(
            id=row["id"],
            user_id=row["user_id"],
            expo_push_token=row["expo_push_token"],
            platform=row["platform"],
            active=bool(row["active"]),
            updated_at=from_db_time(row["updated_at"]),
        )
