"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from src.core.entities import Employee, EmployeeRole, Location
from src.infrastructure.storage.sqlite import SQLiteEmployeeStore


@pytest.fixture
async def seeded_db(migrated_db: Path) -> AsyncGenerator[Path, None]:
    """Migrated database with two locations, two employees and a manager."""
    store = SQLiteEmployeeStore()
    await store.save_location(Location(id="loc-1", name="Downtown", short_code="DT"))
    await store.save_location(Location(id="loc-2", name="Airport", short_code="AP"))
    await store.save_location(Location(id="loc-old", name="Closed", active=False))
    await store.save_employee(
        Employee(id="emp-1", name="Alex", email="alex@example.com", default_location_id="loc-1")
    )
    await store.save_employee(
        Employee(id="emp-2", name="Blair", default_location_id="loc-2", notifications_enabled=False)
    )
    await store.save_employee(
        Employee(id="mgr-1", name="Morgan", role=EmployeeRole.MANAGER, default_location_id="loc-1")
    )
    yield migrated_db
