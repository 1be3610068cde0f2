"""API route modules."""

from src.api.routes.health import router as health_router
from src.api.routes.recurring_reminders import router as recurring_reminders_router
from src.api.routes.reminder_settings import router as reminder_settings_router
from src.api.routes.reminders import router as reminders_router

__all__ = [
    "health_router",
    "reminders_router",
    "recurring_reminders_router",
    "reminder_settings_router",
]
