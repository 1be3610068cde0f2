"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import datetime
from pathlib import Path

import pytest

from src.application.services import reset_services
from src.config import reset_settings
from src.core.entities import Employee, EmployeeRole, Location, ReminderSystemSettings
from src.infrastructure.storage.sqlite import close_pool
from src.infrastructure.storage.sqlite.migrations import initialize_database
from tests.factories import ORG_ID, WEDNESDAY_9AM_LA


@pytest.fixture
def settings() -> ReminderSystemSettings:
    """Default organisation settings."""
    return ReminderSystemSettings(org_id=ORG_ID)


@pytest.fixture
def now() -> datetime:
    return WEDNESDAY_9AM_LA


@pytest.fixture
def location() -> Location:
    return Location(id="loc-1", name="Downtown", short_code="DT")


@pytest.fixture
def employee() -> Employee:
    return Employee(
        id="emp-1",
        name="Alex Rivera",
        email="alex@example.com",
        role=EmployeeRole.EMPLOYEE,
        default_location_id="loc-1",
    )


@pytest.fixture
def manager() -> Employee:
    return Employee(
        id="mgr-1",
        name="Morgan Lee",
        email="morgan@example.com",
        role=EmployeeRole.MANAGER,
        default_location_id="loc-1",
    )


@pytest.fixture
async def migrated_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Path, None]:
    """
    Fresh database created by the real migrator.

    The global pool and service singletons point at it for the duration
    of the test.
    """
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORAGE_DB_NAME", "test.db")
    monkeypatch.setenv("STORAGE_POOL_SIZE", "2")
    await close_pool()
    reset_settings()
    reset_services()

    results = await initialize_database(create_backup_before=False)
    assert all(r.success for r in results)

    yield tmp_path / "test.db"

    await close_pool()
    reset_services()
    reset_settings()
