"""Tests for SQLiteEmployeeStore and SQLiteOrderStore."""

from datetime import timedelta

import pytest

from src.core.entities import EmployeeRole, Order
from src.infrastructure.storage.sqlite import SQLiteEmployeeStore, SQLiteOrderStore
from tests.factories import WEDNESDAY_9AM_LA as NOW


@pytest.fixture
def employees(seeded_db) -> SQLiteEmployeeStore:
    return SQLiteEmployeeStore()


@pytest.fixture
def orders(seeded_db) -> SQLiteOrderStore:
    return SQLiteOrderStore()


class TestEmployeeStore:
    """User and profile reads."""

    async def test_get_employee(self, employees):
        employee = await employees.get_employee("emp-2")
        assert employee.name == "Blair"
        assert employee.notifications_enabled is False
        assert employee.role == EmployeeRole.EMPLOYEE

    async def test_filter_by_role_and_location(self, employees):
        staff = await employees.list_employees(roles=[EmployeeRole.EMPLOYEE])
        assert [e.id for e in staff] == ["emp-1", "emp-2"]

        at_downtown = await employees.list_employees(location_id="loc-1")
        assert {e.id for e in at_downtown} == {"emp-1", "mgr-1"}

    async def test_active_locations(self, employees):
        active = await employees.list_locations()
        assert {loc.id for loc in active} == {"loc-1", "loc-2"}
        assert len(await employees.list_locations(active_only=False)) == 3


class TestOrderStore:
    """Latest non-draft order lookups."""

    async def test_latest_ignores_drafts(self, orders):
        await orders.record_order(Order(employee_id="emp-1", created_at=NOW))
        await orders.record_order(
            Order(employee_id="emp-1", created_at=NOW + timedelta(hours=1), status="draft")
        )

        latest = await orders.get_latest_order("emp-1")
        assert latest.created_at == NOW
        assert await orders.get_latest_order("emp-2") is None

    async def test_latest_orders_batch(self, orders):
        await orders.record_order(Order(employee_id="emp-1", created_at=NOW))
        await orders.record_order(Order(employee_id="emp-1", created_at=NOW + timedelta(days=1)))
        await orders.record_order(Order(employee_id="emp-2", created_at=NOW))

        latest = await orders.get_latest_orders(["emp-1", "emp-2"])
        assert latest["emp-1"].created_at == NOW + timedelta(days=1)
        assert latest["emp-2"].created_at == NOW
        assert await orders.get_latest_orders([]) == {}

    async def test_order_updates_profile_last_order(self, orders, employees):
        await orders.record_order(Order(employee_id="emp-1", created_at=NOW))
        employee = await employees.get_employee("emp-1")
        assert employee.last_order_at == NOW
