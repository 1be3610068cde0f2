"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.config import get_settings
from src.core.services import (
    NotificationDispatcher,
    RecurringRuleEngine,
    ReminderOverviewService,
    ReminderSender,
)

if TYPE_CHECKING:
    from src.core.interfaces import (
        IEmployeeStore,
        INotificationStore,
        IOrderStore,
        IPushGateway,
        IRecurringRuleStore,
        IReminderStore,
    )


# Singleton service instances
_notification_dispatcher: NotificationDispatcher | None = None
_reminder_sender: ReminderSender | None = None
_recurring_engine: RecurringRuleEngine | None = None
_overview_service: ReminderOverviewService | None = None


async def get_notification_dispatcher(
    reminder_store: "IReminderStore | None" = None,
    notification_store: "INotificationStore | None" = None,
    push_gateway: "IPushGateway | None" = None,
) -> NotificationDispatcher:
    """
    Get or create NotificationDispatcher instance.

    Overrides produce a fresh, uncached instance.
    """
    global _notification_dispatcher

    overridden = any(d is not None for d in (reminder_store, notification_store, push_gateway))
    if _notification_dispatcher is not None and not overridden:
        return _notification_dispatcher

    # Lazy import infrastructure
    from src.infrastructure.push import get_push_gateway
    from src.infrastructure.storage.sqlite import get_notification_store, get_reminder_store

    settings = get_settings()
    service = NotificationDispatcher(
        reminder_store=reminder_store or await get_reminder_store(),
        notification_store=notification_store or await get_notification_store(),
        push_gateway=push_gateway or get_push_gateway(),
        title=settings.reminders.title,
        default_body=settings.reminders.default_message,
        chunk_size=settings.push.chunk_size,
    )

    if not overridden:
        _notification_dispatcher = service

    return service


async def get_reminder_sender(
    employee_store: "IEmployeeStore | None" = None,
    order_store: "IOrderStore | None" = None,
    reminder_store: "IReminderStore | None" = None,
    dispatcher: NotificationDispatcher | None = None,
) -> ReminderSender:
    """
    Get or create ReminderSender instance.

    The cached instance owns the per-pair lock registry, so every send in
    this process must go through it.
    """
    global _reminder_sender

    overridden = any(
        d is not None for d in (employee_store, order_store, reminder_store, dispatcher)
    )
    if _reminder_sender is not None and not overridden:
        return _reminder_sender

    from src.infrastructure.storage.sqlite import (
        get_employee_store,
        get_order_store,
        get_reminder_store,
    )

    service = ReminderSender(
        employee_store=employee_store or await get_employee_store(),
        order_store=order_store or await get_order_store(),
        reminder_store=reminder_store or await get_reminder_store(),
        dispatcher=dispatcher or await get_notification_dispatcher(),
    )

    if not overridden:
        _reminder_sender = service

    return service


async def get_recurring_engine(
    rule_store: "IRecurringRuleStore | None" = None,
    employee_store: "IEmployeeStore | None" = None,
    order_store: "IOrderStore | None" = None,
    sender: ReminderSender | None = None,
) -> RecurringRuleEngine:
    """Get or create RecurringRuleEngine instance."""
    global _recurring_engine

    overridden = any(d is not None for d in (rule_store, employee_store, order_store, sender))
    if _recurring_engine is not None and not overridden:
        return _recurring_engine

    from src.infrastructure.storage.sqlite import (
        get_employee_store,
        get_order_store,
        get_rule_store,
    )

    service = RecurringRuleEngine(
        rule_store=rule_store or await get_rule_store(),
        employee_store=employee_store or await get_employee_store(),
        order_store=order_store or await get_order_store(),
        sender=sender or await get_reminder_sender(),
        max_concurrent_dispatches=get_settings().reminders.max_concurrent_dispatches,
    )

    if not overridden:
        _recurring_engine = service

    return service


async def get_overview_service(
    employee_store: "IEmployeeStore | None" = None,
    order_store: "IOrderStore | None" = None,
    reminder_store: "IReminderStore | None" = None,
) -> ReminderOverviewService:
    """Get or create ReminderOverviewService instance."""
    global _overview_service

    overridden = any(d is not None for d in (employee_store, order_store, reminder_store))
    if _overview_service is not None and not overridden:
        return _overview_service

    from src.infrastructure.storage.sqlite import (
        get_employee_store,
        get_order_store,
        get_reminder_store,
    )

    service = ReminderOverviewService(
        employee_store=employee_store or await get_employee_store(),
        order_store=order_store or await get_order_store(),
        reminder_store=reminder_store or await get_reminder_store(),
        timezone=get_settings().reminders.default_timezone,
    )

    if not overridden:
        _overview_service = service

    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _notification_dispatcher
    global _reminder_sender
    global _recurring_engine
    global _overview_service

    _notification_dispatcher = None
    _reminder_sender = None
    _recurring_engine = None
    _overview_service = None


__all__ = [
    # Factory functions
    "get_notification_dispatcher",
    "get_reminder_sender",
    "get_recurring_engine",
    "get_overview_service",
    # Reset
    "reset_services",
]
