"""
SQLite implementation of employee storage.

Reads users joined with profiles, and locations.
"""

import aiosqlite

from src.config import get_logger
from src.core.entities.employee import Employee, EmployeeRole, Location
from src.core.interfaces.storage import IEmployeeStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import from_db_time, to_db_time

logger = get_logger(__name__)

_EMPLOYEE_SELECT = """
    SELECT
        u.id, u.name, u.email, u.role, u.default_location_id,
        p.notifications_enabled, p.is_suspended,
        p.last_active_at, p.last_order_at
    FROM users u
    LEFT JOIN profiles p ON p.id = u.id
"""


class SQLiteEmployeeStore(IEmployeeStore):
    """SQLite implementation of employee storage."""

    async def get_employee(self, user_id: str) -> Employee | None:
        async with get_connection() as conn:
            cursor = await conn.execute(f"{_EMPLOYEE_SELECT} WHERE u.id = ?", (user_id,))
            row = await cursor.fetchone()
            return self._row_to_employee(row) if row else None

    async def list_employees(
        self,
        roles: list[EmployeeRole] | None = None,
        location_id: str | None = None,
    ) -> list[Employee]:
        clauses: list[str] = []
        params: list[str] = []
        if roles:
            clauses.append(f"u.role IN ({', '.join('?' for _ in roles)})")
            params.extend(role.value for role in roles)
        if location_id:
            clauses.append("u.default_location_id = ?")
            params.append(location_id)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"{_EMPLOYEE_SELECT} {where} ORDER BY u.name COLLATE NOCASE ASC, u.id ASC",
                params,
            )
            rows = await cursor.fetchall()
            return [self._row_to_employee(row) for row in rows]

    async def list_locations(self, active_only: bool = True) -> list[Location]:
        sql = "SELECT * FROM locations"
        if active_only:
            sql += " WHERE active = 1"
        async with get_connection() as conn:
            cursor = await conn.execute(sql + " ORDER BY name ASC")
            rows = await cursor.fetchall()
            return [
                Location(
                    id=row["id"],
                    name=row["name"],
                    short_code=row["short_code"],
                    active=bool(row["active"]),
                )
                for row in rows
            ]

    async def save_employee(self, employee: Employee) -> Employee:
        """Insert or replace a user and its profile."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO users (id, name, email, role, default_location_id)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    email = excluded.email,
                    role = excluded.role,
                    default_location_id = excluded.default_location_id
                """,
                (
                    employee.id,
                    employee.name,
                    employee.email,
                    employee.role.value,
                    employee.default_location_id,
                ),
            )
            await conn.execute(
                """
                INSERT INTO profiles (
                    id, notifications_enabled, is_suspended, last_active_at, last_order_at
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    notifications_enabled = excluded.notifications_enabled,
                    is_suspended = excluded.is_suspended,
                    last_active_at = excluded.last_active_at,
                    last_order_at = excluded.last_order_at
                """,
                (
                    employee.id,
                    1 if employee.notifications_enabled else 0,
                    1 if employee.is_suspended else 0,
                    to_db_time(employee.last_active_at),
                    to_db_time(employee.last_order_at),
                ),
            )
        logger.info("employee_saved", user_id=employee.id, role=employee.role.value)
        return employee

    async def save_location(self, location: Location) -> Location:
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO locations (id, name, short_code, active)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    short_code = excluded.short_code,
                    active = excluded.active
                """,
                (location.id, location.name, location.short_code, 1 if location.active else 0),
            )
        return location

    @staticmethod
    def _row_to_employee(row: aiosqlite.Row) -> Employee:
        """Convert a joined user/profile row. A missing profile means defaults."""
        notifications = row["notifications_enabled"]
        return Employee(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            role=EmployeeRole(row["role"]),
            default_location_id=row["default_location_id"],
            is_suspended=bool(row["is_suspended"]),
            notifications_enabled=notifications is None or bool(notifications),
            last_order_at=from_db_time(row["last_order_at"]),
            last_active_at=from_db_time(row["last_active_at"]),
        )
