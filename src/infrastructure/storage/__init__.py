"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteEmployeeStore,
    SQLiteIdentityStore,
    SQLiteNotificationStore,
    SQLiteOrderStore,
    SQLiteRecurringRuleStore,
    SQLiteReminderSettingsStore,
    SQLiteReminderStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteEmployeeStore",
    "SQLiteIdentityStore",
    "SQLiteNotificationStore",
    "SQLiteOrderStore",
    "SQLiteRecurringRuleStore",
    "SQLiteReminderSettingsStore",
    "SQLiteReminderStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
