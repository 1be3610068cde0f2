"""
Reminder thread lifecycle.

One active thread per (employee, location) pair. Re-triggers bump the
existing thread; a newer order resolves it.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.config import get_logger
from src.core.entities.order import Order
from src.core.entities.reminder import ReminderEventType, ReminderThread
from src.core.exceptions import ReminderEngineError
from src.core.interfaces.storage import IReminderStore

logger = get_logger(__name__)


@dataclass
class ActiveThreadLookup:
    """Canonical active thread for a pair, plus any integrity warnings."""

    thread: ReminderThread | None
    warnings: list[str] = field(default_factory=list)


class ReminderThreadService:
    """Layer-pure service over IReminderStore."""

    def __init__(self, reminder_store: IReminderStore) -> None:
        self._store = reminder_store

    async def find_active(self, employee_id: str, location_id: str | None) -> ActiveThreadLookup:
        """
        Load the active thread for a pair.

        More than one active row breaks the invariant. The newest is used
        and the rest are reported, never merged.
        """
        threads = await self._store.find_active_threads(employee_id, location_id)
        if not threads:
            return ActiveThreadLookup(thread=None)

        lookup = ActiveThreadLookup(thread=threads[0])
        if len(threads) > 1:
            ids = [t.id for t in threads]
            logger.warning(
                "duplicate_active_reminder_threads",
                employee_id=employee_id,
                location_id=location_id,
                reminder_ids=ids,
                canonical_id=threads[0].id,
            )
            lookup.warnings.append(
                f"Multiple active reminder threads for employee {employee_id} "
                f"at location {location_id or 'any'}: {', '.join(str(i) for i in ids)}"
            )
        return lookup

    async def upsert_on_trigger(
        self,
        thread: ReminderThread | None,
        employee_id: str,
        location_id: str | None,
        manager_id: str | None,
        now: datetime,
    ) -> tuple[ReminderThread, ReminderEventType]:
        """
        Create a thread or bump the one just read.

        Raises:
            ConcurrentReminderUpdateError: Another writer got there first.
        """
        if thread is not None:
            updated = await self._store.increment_thread(thread, manager_id, now)
            return updated, ReminderEventType.REMINDED_AGAIN

        created = await self._store.create_thread(
            ReminderThread(
                employee_id=employee_id,
                manager_id=manager_id,
                location_id=location_id,
                created_at=now,
                last_reminded_at=now,
                reminder_count=1,
            )
        )
        return created, ReminderEventType.SENT

    @staticmethod
    def is_stale(thread: ReminderThread, newest_order: Order | None) -> bool:
        """A thread is stale once a non-draft order newer than it exists."""
        if newest_order is None or newest_order.is_draft:
            return False
        return newest_order.created_at > thread.created_at

    async def resolve_if_stale(
        self,
        thread: ReminderThread,
        newest_order: Order | None,
        warnings: list[str],
    ) -> bool:
        """
        Resolve a stale thread through the store.

        Returns True when this thread ended up resolved. Store failures are
        logged and appended to ``warnings``; the thread is then left as is.
        """
        return thread.id in await self.resolve_stale(thread, newest_order, warnings)

    async def resolve_stale(
        self,
        thread: ReminderThread,
        newest_order: Order | None,
        warnings: list[str],
    ) -> list[str]:
        """Like resolve_if_stale, but returns every thread ID the order resolved."""
        if not self.is_stale(thread, newest_order):
            return []

        try:
            resolved_ids = await self._store.resolve_active_for_employee(
                thread.employee_id,
                newest_order.created_at,
                newest_order.id,
            )
        except ReminderEngineError as e:
            logger.error(
                "stale_reminder_resolution_failed",
                reminder_id=thread.id,
                employee_id=thread.employee_id,
                order_id=newest_order.id,
                error=str(e),
            )
            warnings.append(f"Failed to resolve stale reminder {thread.id}: {e.message}")
            return []

        if resolved_ids:
            logger.info(
                "stale_reminders_resolved",
                employee_id=thread.employee_id,
                order_id=newest_order.id,
                reminder_ids=resolved_ids,
            )
        return resolved_ids
