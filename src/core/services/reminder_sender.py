"""
Reminder Sender.

The one path every reminder takes: validate the employee, re-read the
thread under a per-pair lock, resolve it if an order superseded it, check
the rate limit against that fresh read, mutate the thread and dispatch.
"""

import asyncio
import weakref
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.config import get_logger
from src.core.entities.employee import Employee, EmployeeRole
from src.core.entities.reminder import (
    ChannelConfig,
    DeliveryChannel,
    PushDeliveryResult,
    ReminderEvent,
    ReminderSource,
    ReminderThread,
)
from src.core.entities.settings import ReminderSystemSettings
from src.core.exceptions import (
    EmployeeNotFoundError,
    EmployeeSuspendedError,
    RateLimitedError,
)
from src.core.interfaces.storage import IEmployeeStore, IOrderStore, IReminderStore
from src.core.services.notification_dispatcher import NotificationDispatcher
from src.core.services.rate_limiter import RateLimitDecision, check_rate_limit
from src.core.services.reminder_threads import ReminderThreadService

logger = get_logger(__name__)


@dataclass
class SendReminderCommand:
    employee_id: str
    manager_id: str | None = None
    location_id: str | None = None
    message: str | None = None
    override_rate_limit: bool = False
    source: ReminderSource = ReminderSource.MANUAL
    channels: ChannelConfig = field(default_factory=ChannelConfig)


@dataclass
class SendReminderResult:
    reminder: ReminderThread
    event: ReminderEvent
    push: PushDeliveryResult
    notifications_enabled: bool
    settings: ReminderSystemSettings
    in_app_notification_id: str | None = None
    channels_attempted: list[DeliveryChannel] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ReminderSender:
    """
    Serializes thread mutation per (employee, location) inside this process.

    Across processes the conditional update and the partial unique index
    reject the losing writer with ConcurrentReminderUpdateError.
    """

    def __init__(
        self,
        employee_store: IEmployeeStore,
        order_store: IOrderStore,
        reminder_store: IReminderStore,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._employees = employee_store
        self._orders = order_store
        self._reminders = reminder_store
        self._threads = ReminderThreadService(reminder_store)
        self._dispatcher = dispatcher
        self._locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, employee_id: str, location_id: str | None) -> asyncio.Lock:
        key = (employee_id, location_id or "")
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def load_remindable_employee(self, employee_id: str) -> Employee:
        """
        Raises:
            EmployeeNotFoundError: Missing user or not an employee account.
            EmployeeSuspendedError: Suspended employee.
        """
        employee = await self._employees.get_employee(employee_id)
        if employee is None or employee.role != EmployeeRole.EMPLOYEE:
            raise EmployeeNotFoundError(employee_id)
        if employee.is_suspended:
            raise EmployeeSuspendedError(employee_id)
        return employee

    async def _last_reminded_at(
        self,
        thread: ReminderThread | None,
        employee_id: str,
        location_id: str | None,
    ) -> datetime | None:
        if thread is not None:
            return thread.last_reminded_at
        latest = await self._reminders.find_latest_thread(employee_id, location_id)
        return latest.last_reminded_at if latest else None

    async def preview(
        self,
        employee: Employee,
        location_id: str | None,
        settings: ReminderSystemSettings,
        override_rate_limit: bool = False,
        now: datetime | None = None,
    ) -> RateLimitDecision:
        """Rate-limit verdict a live send would get, without writing anything."""
        now = now or datetime.now(UTC)
        latest_order = await self._orders.get_latest_order(employee.id)
        lookup = await self._threads.find_active(employee.id, location_id)
        thread = lookup.thread
        if thread is not None and self._threads.is_stale(thread, latest_order):
            thread = None
        last_reminded_at = await self._last_reminded_at(thread, employee.id, location_id)
        return check_rate_limit(
            last_reminded_at,
            settings.reminder_rate_limit_minutes,
            override_rate_limit,
            now,
        )

    async def send(
        self,
        command: SendReminderCommand,
        settings: ReminderSystemSettings,
        now: datetime | None = None,
        employee: Employee | None = None,
    ) -> SendReminderResult:
        """
        Send one reminder.

        Raises:
            EmployeeNotFoundError, EmployeeSuspendedError: Bad target.
            RateLimitedError: Sent too recently on this thread.
            ConcurrentReminderUpdateError: Lost a race with another process.
            InAppDeliveryError: In-app notification could not be stored.
        """
        now = now or datetime.now(UTC)
        if employee is None:
            employee = await self.load_remindable_employee(command.employee_id)
        location_id = command.location_id or employee.default_location_id
        warnings: list[str] = []

        async with self._lock_for(employee.id, location_id):
            latest_order = await self._orders.get_latest_order(employee.id)
            lookup = await self._threads.find_active(employee.id, location_id)
            warnings.extend(lookup.warnings)

            thread = lookup.thread
            if thread is not None and await self._threads.resolve_if_stale(
                thread, latest_order, warnings
            ):
                thread = None

            last_reminded_at = await self._last_reminded_at(thread, employee.id, location_id)
            decision = check_rate_limit(
                last_reminded_at,
                settings.reminder_rate_limit_minutes,
                command.override_rate_limit,
                now,
            )
            if not decision.allowed:
                logger.info(
                    "reminder_rate_limited",
                    employee_id=employee.id,
                    location_id=location_id,
                    retry_after_seconds=decision.retry_after_seconds,
                    source=command.source.value,
                )
                raise RateLimitedError(
                    decision.retry_after_seconds or 1,
                    settings.reminder_rate_limit_minutes,
                )

            thread, event_type = await self._threads.upsert_on_trigger(
                thread, employee.id, location_id, command.manager_id, now
            )

            dispatch = await self._dispatcher.dispatch(
                thread=thread,
                employee=employee,
                channels=command.channels,
                message=command.message,
                source=command.source,
                event_type=event_type,
                now=now,
            )

        return SendReminderResult(
            reminder=thread,
            event=dispatch.event,
            push=dispatch.push,
            notifications_enabled=dispatch.notifications_enabled,
            settings=settings,
            in_app_notification_id=dispatch.in_app_notification_id,
            channels_attempted=dispatch.channels_attempted,
            warnings=warnings,
        )
