"""SQLite implementation of bearer-token identity lookup."""

import hashlib

from src.config import get_logger
from src.core.entities.employee import EmployeeRole, Requester
from src.core.interfaces.storage import IIdentityStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class SQLiteIdentityStore(IIdentityStore):
    """Tokens are stored hashed; callers present the raw value."""

    async def get_requester_by_token(self, token: str) -> Requester | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT u.id, u.role, p.is_suspended
                FROM api_tokens t
                JOIN users u ON u.id = t.user_id
                LEFT JOIN profiles p ON p.id = u.id
                WHERE t.token_hash = ?
                """,
                (hash_token(token),),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return Requester(
                user_id=row["id"],
                role=EmployeeRole(row["role"]) if row["role"] else None,
                suspended=bool(row["is_suspended"]),
            )

    async def issue_token(self, user_id: str, token: str) -> None:
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO api_tokens (token_hash, user_id) VALUES (?, ?)
                ON CONFLICT(token_hash) DO UPDATE SET user_id = excluded.user_id
                """,
                (hash_token(token), user_id),
            )
        logger.info("api_token_issued", user_id=user_id)
