"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.push import IPushGateway, PushMessage, PushTicket
from src.core.interfaces.storage import (
    IEmployeeStore,
    IIdentityStore,
    INotificationStore,
    IOrderStore,
    IRecurringRuleStore,
    IReminderSettingsStore,
    IReminderStore,
)

__all__ = [
    # Storage interfaces
    "IEmployeeStore",
    "IIdentityStore",
    "INotificationStore",
    "IOrderStore",
    "IRecurringRuleStore",
    "IReminderSettingsStore",
    "IReminderStore",
    # Push
    "IPushGateway",
    "PushMessage",
    "PushTicket",
]
