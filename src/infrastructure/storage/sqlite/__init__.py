"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.employee_store import SQLiteEmployeeStore
from src.infrastructure.storage.sqlite.identity_store import SQLiteIdentityStore
from src.infrastructure.storage.sqlite.notification_store import SQLiteNotificationStore
from src.infrastructure.storage.sqlite.order_store import SQLiteOrderStore
from src.infrastructure.storage.sqlite.reminder_store import SQLiteReminderStore
from src.infrastructure.storage.sqlite.rule_store import SQLiteRecurringRuleStore
from src.infrastructure.storage.sqlite.settings_store import SQLiteReminderSettingsStore

# Singleton instances
_employee_store: SQLiteEmployeeStore | None = None
_order_store: SQLiteOrderStore | None = None
_reminder_store: SQLiteReminderStore | None = None
_rule_store: SQLiteRecurringRuleStore | None = None
_settings_store: SQLiteReminderSettingsStore | None = None
_notification_store: SQLiteNotificationStore | None = None
_identity_store: SQLiteIdentityStore | None = None


async def get_employee_store() -> SQLiteEmployeeStore:
    """Get singleton employee store instance."""
    global _employee_store
    if _employee_store is None:
        _employee_store = SQLiteEmployeeStore()
    return _employee_store


async def get_order_store() -> SQLiteOrderStore:
    """Get singleton order store instance."""
    global _order_store
    if _order_store is None:
        _order_store = SQLiteOrderStore()
    return _order_store


async def get_reminder_store() -> SQLiteReminderStore:
    """Get singleton reminder store instance."""
    global _reminder_store
    if _reminder_store is None:
        _reminder_store = SQLiteReminderStore()
    return _reminder_store


async def get_rule_store() -> SQLiteRecurringRuleStore:
    """Get singleton recurring rule store instance."""
    global _rule_store
    if _rule_store is None:
        _rule_store = SQLiteRecurringRuleStore()
    return _rule_store


async def get_settings_store() -> SQLiteReminderSettingsStore:
    """Get singleton reminder settings store instance."""
    global _settings_store
    if _settings_store is None:
        _settings_store = SQLiteReminderSettingsStore()
    return _settings_store


async def get_notification_store() -> SQLiteNotificationStore:
    """Get singleton notification store instance."""
    global _notification_store
    if _notification_store is None:
        _notification_store = SQLiteNotificationStore()
    return _notification_store


async def get_identity_store() -> SQLiteIdentityStore:
    """Get singleton identity store instance."""
    global _identity_store
    if _identity_store is None:
        _identity_store = SQLiteIdentityStore()
    return _identity_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteEmployeeStore",
    "SQLiteOrderStore",
    "SQLiteReminderStore",
    "SQLiteRecurringRuleStore",
    "SQLiteReminderSettingsStore",
    "SQLiteNotificationStore",
    "SQLiteIdentityStore",
    # Factory functions
    "get_employee_store",
    "get_order_store",
    "get_reminder_store",
    "get_rule_store",
    "get_settings_store",
    "get_notification_store",
    "get_identity_store",
]
