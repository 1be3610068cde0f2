"""Manager dashboard snapshot entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.core.entities.employee import EmployeeRole
from src.core.entities.reminder import utc_now
from src.core.entities.settings import ReminderSystemSettings


class EmployeeReminderState(str, Enum):
    """Per-employee status, in priority order."""

    REMINDER_ACTIVE = "reminder_active"
    OVERDUE = "overdue"
    OK = "ok"


class ReminderThreadSummary(BaseModel):
    id: str
    location_id: str | None = None
    manager_id: str | None = None
    created_at: datetime
    last_reminded_at: datetime | None = None
    reminder_count: int = 1


class EmployeeReminderStatusRow(BaseModel):
    """One employee as shown on the dashboard."""

    user_id: str
    name: str
    email: str | None = None
    role: EmployeeRole
    location_id: str | None = None
    location_name: str = "Unassigned"
    location_short_code: str | None = None
    last_order_at: datetime | None = None
    last_activity_at: datetime | None = None
    days_since_last_order: int | None = None
    status: EmployeeReminderState = EmployeeReminderState.OK
    notifications_enabled: bool = True
    active_reminder: ReminderThreadSummary | None = None
    is_suspended: bool = False

    @property
    def notifications_off(self) -> bool:
        return not self.notifications_enabled


class OverviewStats(BaseModel):
    """At-a-glance counts, derived from the rows of the same response."""

    pending_reminders: int = 0
    overdue_employees: int = 0
    notifications_off: int = 0


class ReminderOverview(BaseModel):
    employees: list[EmployeeReminderStatusRow] = Field(default_factory=list)
    stats: OverviewStats = Field(default_factory=OverviewStats)
    settings: ReminderSystemSettings
    generated_at: datetime = Field(default_factory=utc_now)
    warnings: list[str] = Field(default_factory=list)
