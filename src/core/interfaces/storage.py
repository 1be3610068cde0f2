"""
Abstract interfaces for storage providers.

Defines contracts for identity, order, reminder, rule, settings and
notification stores. Implementations convert rows into entities before
returning them.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.employee import Employee, EmployeeRole, Location, Requester
from src.core.entities.order import Order
from src.core.entities.reminder import (
    DevicePushToken,
    InAppNotification,
    ReminderDeliveryLogEntry,
    ReminderEvent,
    ReminderThread,
)
from src.core.entities.rule import RecurringReminderRule
from src.core.entities.settings import ReminderSettingsPatch, ReminderSystemSettings


class IEmployeeStore(ABC):
    """Read access to users joined with their profiles, plus locations."""

    @abstractmethod
    async def get_employee(self, user_id: str) -> Employee | None:
        """Get a user (any role) by ID."""
        pass

    @abstractmethod
    async def list_employees(
        self,
        roles: list[EmployeeRole] | None = None,
        location_id: str | None = None,
    ) -> list[Employee]:
        """List users ordered by name, optionally filtered by role and default location."""
        pass

    @abstractmethod
    async def list_locations(self, active_only: bool = True) -> list[Location]:
        """List locations."""
        pass


class IOrderStore(ABC):
    """Read access to non-draft orders."""

    @abstractmethod
    async def get_latest_order(self, employee_id: str) -> Order | None:
        """Most recent non-draft order of one employee."""
        pass

    @abstractmethod
    async def get_latest_orders(self, employee_ids: list[str]) -> dict[str, Order]:
        """Most recent non-draft order per employee, keyed by employee ID."""
        pass

    @abstractmethod
    async def record_order(self, order: Order) -> Order:
        """Insert an order. Non-draft orders resolve superseded reminder threads."""
        pass


class IReminderStore(ABC):
    """
    Reminder threads and their immutable delivery events.

    Thread mutations are conditional so concurrent writers cannot both win.
    """

    @abstractmethod
    async def get_thread(self, reminder_id: str) -> ReminderThread | None:
        """Get a thread by ID."""
        pass

    @abstractmethod
    async def find_active_threads(
        self, employee_id: str, location_id: str | None
    ) -> list[ReminderThread]:
        """Active threads for the exact (employee, location) pair, newest first."""
        pass

    @abstractmethod
    async def find_latest_thread(
        self,
        employee_id: str,
        location_id: str | None,
        include_resolved: bool = False,
    ) -> ReminderThread | None:
        """Most recently reminded thread for the pair, of any status."""
        pass

    @abstractmethod
    async def list_active_threads(self, employee_ids: list[str]) -> list[ReminderThread]:
        """Active threads of the given employees, newest first."""
        pass

    @abstractmethod
    async def create_thread(self, thread: ReminderThread) -> ReminderThread:
        """Insert a new active thread. Raises ConcurrentReminderUpdateError on conflict."""
        pass

    @abstractmethod
    async def increment_thread(
        self,
        thread: ReminderThread,
        manager_id: str | None,
        reminded_at: datetime,
    ) -> ReminderThread:
        """
        Bump reminder_count and last_reminded_at.

        Applies only if the row is still active with the count just read;
        otherwise raises ConcurrentReminderUpdateError.
        """
        pass

    @abstractmethod
    async def resolve_active_for_employee(
        self,
        employee_id: str,
        order_created_at: datetime,
        order_id: str | None,
    ) -> list[str]:
        """
        Resolve every active thread created at or before the order.

        Re-reminders do not protect a thread: an order synced late with an
        earlier timestamp still resolves it. Returns the resolved thread IDs.
        """
        pass

    @abstractmethod
    async def add_event(self, event: ReminderEvent) -> ReminderEvent:
        """Append an immutable event."""
        pass

    @abstractmethod
    async def list_events_for_thread(self, reminder_id: str) -> list[ReminderEvent]:
        """Events of one thread, oldest first."""
        pass

    @abstractmethod
    async def list_recent_events(self, limit: int = 50) -> list[ReminderDeliveryLogEntry]:
        """Newest events joined with thread and employee name."""
        pass


class IRecurringRuleStore(ABC):
    """Recurring reminder rule persistence."""

    @abstractmethod
    async def get_rule(self, rule_id: str) -> RecurringReminderRule | None:
        pass

    @abstractmethod
    async def list_rules(self) -> list[RecurringReminderRule]:
        """All rules, newest first."""
        pass

    @abstractmethod
    async def list_enabled_rules(self) -> list[RecurringReminderRule]:
        """Enabled rules, oldest first."""
        pass

    @abstractmethod
    async def upsert_rule(self, rule: RecurringReminderRule) -> RecurringReminderRule:
        """Insert a rule without ID, or replace the existing one."""
        pass

    @abstractmethod
    async def delete_rule(self, rule_id: str) -> bool:
        pass

    @abstractmethod
    async def mark_triggered(self, rule_id: str, triggered_at: datetime) -> None:
        """Stamp last_triggered_at."""
        pass


class IReminderSettingsStore(ABC):
    """Organisation settings row."""

    @abstractmethod
    async def get_settings(self, org_id: str) -> ReminderSystemSettings | None:
        pass

    @abstractmethod
    async def update_settings(
        self, org_id: str, patch: ReminderSettingsPatch
    ) -> ReminderSystemSettings:
        """Apply a partial update, creating the row if missing."""
        pass


class INotificationStore(ABC):
    """In-app notifications and device push tokens."""

    @abstractmethod
    async def create_notification(self, notification: InAppNotification) -> InAppNotification:
        pass

    @abstractmethod
    async def list_notifications(self, user_id: str, limit: int = 50) -> list[InAppNotification]:
        """Newest notifications for a user."""
        pass

    @abstractmethod
    async def list_active_push_tokens(self, user_id: str) -> list[DevicePushToken]:
        """Active tokens, most recently updated first."""
        pass

    @abstractmethod
    async def register_push_token(self, token: DevicePushToken) -> DevicePushToken:
        """Insert or reactivate a token for a user."""
        pass


class IIdentityStore(ABC):
    """Maps bearer tokens to callers."""

    @abstractmethod
    async def get_requester_by_token(self, token: str) -> Requester | None:
        pass

    @abstractmethod
    async def issue_token(self, user_id: str, token: str) -> None:
        """Register a bearer token for a user."""
        pass
