"""SQLite implementation of order storage (non-draft reads)."""

import aiosqlite

from src.config import get_logger
from src.core.entities.order import DRAFT_STATUS, Order
from src.core.interfaces.storage import IOrderStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import from_db_time, new_id, to_db_time

logger = get_logger(__name__)


class SQLiteOrderStore(IOrderStore):
    """SQLite implementation of order storage."""

    async def get_latest_order(self, employee_id: str) -> Order | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM orders
                WHERE user_id = ? AND status <> ?
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (employee_id, DRAFT_STATUS),
            )
            row = await cursor.fetchone()
            return self._row_to_entity(row) if row else None

    async def get_latest_orders(self, employee_ids: list[str]) -> dict[str, Order]:
        if not employee_ids:
            return {}
        placeholders = ", ".join("?" for _ in employee_ids)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM (
                    SELECT o.*, ROW_NUMBER() OVER (
                        PARTITION BY o.user_id ORDER BY o.created_at DESC
                    ) AS rn
                    FROM orders o
                    WHERE o.user_id IN ({placeholders}) AND o.status <> ?
                )
                WHERE rn = 1
                """,
                (*employee_ids, DRAFT_STATUS),
            )
            rows = await cursor.fetchall()
            return {row["user_id"]: self._row_to_entity(row) for row in rows}

    async def record_order(self, order: Order) -> Order:
        """Insert an order; the schema trigger resolves superseded reminder threads."""
        if not order.id:
            order = order.model_copy(update={"id": new_id()})
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO orders (id, user_id, location_id, status, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    order.id,
                    order.employee_id,
                    order.location_id,
                    order.status,
                    to_db_time(order.created_at),
                ),
            )
        logger.info(
            "order_recorded",
            order_id=order.id,
            employee_id=order.employee_id,
            status=order.status,
        )
        return order

    @staticmethod
    def _row_to_entity(row: aiosqlite.Row) -> Order:
        return Order(
            id=row["id"],
            employee_id=row["user_id"],
            location_id=row["location_id"],
            created_at=from_db_time(row["created_at"]),
            status=row["status"],
        )
