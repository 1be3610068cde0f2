"""Tests for SQLiteReminderStore against the migrated schema."""

from datetime import timedelta

import pytest

from src.core.entities import (
    DeliveryChannel,
    Order,
    ReminderEvent,
    ReminderEventType,
    ReminderStatus,
    ReminderThread,
)
from src.core.exceptions import ConcurrentReminderUpdateError
from src.infrastructure.storage.sqlite import SQLiteOrderStore, SQLiteReminderStore
from tests.factories import WEDNESDAY_9AM_LA as NOW


@pytest.fixture
def store(seeded_db) -> SQLiteReminderStore:
    return SQLiteReminderStore()


def _thread(**overrides) -> ReminderThread:
    values = {
        "employee_id": "emp-1",
        "manager_id": "mgr-1",
        "location_id": "loc-1",
        "created_at": NOW,
        "last_reminded_at": NOW,
    }
    values.update(overrides)
    return ReminderThread(**values)


class TestThreads:
    """Thread creation and the one-active-per-pair invariant."""

    async def test_create_and_get(self, store):
        """A created thread gets an id and round-trips its timestamps."""
        created = await store.create_thread(_thread())
        assert created.id

        loaded = await store.get_thread(created.id)
        assert loaded.status == ReminderStatus.ACTIVE
        assert loaded.created_at == NOW
        assert loaded.reminder_count == 1

    async def test_second_active_thread_for_pair_is_rejected(self, store):
        """The partial unique index rejects a duplicate active thread."""
        await store.create_thread(_thread())
        with pytest.raises(ConcurrentReminderUpdateError):
            await store.create_thread(_thread())

    async def test_same_employee_other_location_is_allowed(self, store):
        """Pairs are keyed on location too."""
        await store.create_thread(_thread())
        other = await store.create_thread(_thread(location_id="loc-2"))
        assert other.location_id == "loc-2"

    async def test_null_location_is_its_own_pair(self, store):
        """A missing location still allows only one active thread."""
        await store.create_thread(_thread(location_id=None))
        with pytest.raises(ConcurrentReminderUpdateError):
            await store.create_thread(_thread(location_id=None))

        active = await store.find_active_threads("emp-1", None)
        assert len(active) == 1


class TestIncrement:
    """Conditional increments."""

    async def test_increment(self, store):
        """Incrementing bumps the count and the reminder time."""
        thread = await store.create_thread(_thread())
        later = NOW + timedelta(minutes=20)

        updated = await store.increment_thread(thread, "mgr-1", later)

        assert updated.reminder_count == 2
        loaded = await store.get_thread(thread.id)
        assert loaded.reminder_count == 2
        assert loaded.last_reminded_at == later

    async def test_stale_read_is_rejected(self, store):
        """A writer holding an outdated count loses."""
        thread = await store.create_thread(_thread())
        await store.increment_thread(thread, "mgr-1", NOW + timedelta(minutes=20))

        with pytest.raises(ConcurrentReminderUpdateError):
            await store.increment_thread(thread, "mgr-1", NOW + timedelta(minutes=40))


class TestResolution:
    """Order-driven resolution."""

    async def test_resolve_active_for_employee(self, store):
        """Every active thread reminded before the order is resolved."""
        first = await store.create_thread(_thread())
        second = await store.create_thread(_thread(location_id="loc-2"))
        order_at = NOW + timedelta(hours=1)

        resolved = await store.resolve_active_for_employee("emp-1", order_at, "ord-1")

        assert set(resolved) == {first.id, second.id}
        assert await store.find_active_threads("emp-1", "loc-1") == []
        events = await store.list_events_for_thread(first.id)
        assert events[-1].event_type == ReminderEventType.AUTO_RESOLVED
        assert events[-1].delivery_result["order_id"] == "ord-1"

    async def test_back_dated_order_resolves_re_reminded_thread(self, store):
        """An order synced late still resolves a thread opened before it."""
        thread = await store.create_thread(_thread(last_reminded_at=NOW + timedelta(minutes=30)))

        resolved = await store.resolve_active_for_employee(
            "emp-1", NOW + timedelta(minutes=10), "ord-late"
        )

        assert resolved == [thread.id]
        assert (await store.get_thread(thread.id)).status == ReminderStatus.RESOLVED

    async def test_thread_opened_after_order_stays_active(self, store):
        """Threads created after the order are not superseded by it."""
        await store.create_thread(_thread(created_at=NOW + timedelta(hours=2)))
        resolved = await store.resolve_active_for_employee("emp-1", NOW + timedelta(hours=1), None)
        assert resolved == []

    async def test_order_trigger_resolves_back_dated(self, store):
        """The trigger applies the same rule when an offline order is inserted."""
        thread = await store.create_thread(_thread(last_reminded_at=NOW + timedelta(minutes=30)))
        await SQLiteOrderStore().record_order(
            Order(id="ord-late", employee_id="emp-1", created_at=NOW + timedelta(minutes=10))
        )

        loaded = await store.get_thread(thread.id)
        assert loaded.status == ReminderStatus.RESOLVED
        assert loaded.resolved_at == NOW + timedelta(minutes=10)

    async def test_order_trigger_resolves_threads(self, store):
        """Recording a submitted order resolves threads in the database."""
        thread = await store.create_thread(_thread())
        await SQLiteOrderStore().record_order(
            Order(id="ord-1", employee_id="emp-1", location_id="loc-1", created_at=NOW + timedelta(minutes=5))
        )

        loaded = await store.get_thread(thread.id)
        assert loaded.status == ReminderStatus.RESOLVED
        assert loaded.resolved_at == NOW + timedelta(minutes=5)
        events = await store.list_events_for_thread(thread.id)
        assert [e.event_type for e in events] == [ReminderEventType.AUTO_RESOLVED]

    async def test_draft_order_does_not_resolve(self, store):
        """Drafts are not activity."""
        thread = await store.create_thread(_thread())
        await SQLiteOrderStore().record_order(
            Order(employee_id="emp-1", created_at=NOW + timedelta(minutes=5), status="draft")
        )
        assert (await store.get_thread(thread.id)).status == ReminderStatus.ACTIVE

    async def test_latest_thread_includes_resolved_on_request(self, store):
        """Resolved threads are only found when asked for."""
        await store.create_thread(_thread())
        await store.resolve_active_for_employee("emp-1", NOW + timedelta(minutes=1), None)

        assert await store.find_latest_thread("emp-1", "loc-1") is None
        latest = await store.find_latest_thread("emp-1", "loc-1", include_resolved=True)
        assert latest.status == ReminderStatus.RESOLVED


class TestEvents:
    """Event log."""

    async def test_add_and_list_recent(self, store):
        """Recent events join the thread and employee name, newest first."""
        thread = await store.create_thread(_thread())
        await store.add_event(
            ReminderEvent(
                reminder_id=thread.id,
                sent_at=NOW,
                channels_attempted=[DeliveryChannel.IN_APP, DeliveryChannel.PUSH],
                delivery_result={"source": "manual"},
            )
        )
        await store.add_event(
            ReminderEvent(
                reminder_id=thread.id,
                event_type=ReminderEventType.REMINDED_AGAIN,
                sent_at=NOW + timedelta(minutes=30),
            )
        )

        entries = await store.list_recent_events(limit=10)

        assert [e.event.event_type for e in entries] == [
            ReminderEventType.REMINDED_AGAIN,
            ReminderEventType.SENT,
        ]
        assert entries[1].event.channels_attempted == [DeliveryChannel.IN_APP, DeliveryChannel.PUSH]
        assert entries[0].employee_name == "Alex"
        assert entries[0].manager_id == "mgr-1"

    async def test_list_recent_respects_limit(self, store):
        thread = await store.create_thread(_thread())
        for minutes in range(3):
            await store.add_event(
                ReminderEvent(reminder_id=thread.id, sent_at=NOW + timedelta(minutes=minutes))
            )
        assert len(await store.list_recent_events(limit=2)) == 2

    async def test_list_active_threads(self, store):
        await store.create_thread(_thread())
        await store.create_thread(_thread(employee_id="emp-2", location_id="loc-2"))
        threads = await store.list_active_threads(["emp-1", "emp-2"])
        assert {t.employee_id for t in threads} == {"emp-1", "emp-2"}
        assert await store.list_active_threads([]) == []
