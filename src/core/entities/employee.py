"""Employee, location and caller identity entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class EmployeeRole(str, Enum):
    """Role of a user account."""

    EMPLOYEE = "employee"
    MANAGER = "manager"


class Employee(BaseModel):
    """
    A user joined with its profile.

    Owned by the identity/profile store; read-only to the reminder engine.
    """

    id: str
    name: str | None = None
    email: str | None = None
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    default_location_id: str | None = None
    is_suspended: bool = False
    notifications_enabled: bool = True
    last_order_at: datetime | None = None
    last_active_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown"

    @property
    def is_remindable(self) -> bool:
        """Only active employee accounts receive reminders."""
        return self.role == EmployeeRole.EMPLOYEE and not self.is_suspended


class Location(BaseModel):
    """Restaurant location."""

    id: str
    name: str
    short_code: str | None = None
    active: bool = True


class Requester(BaseModel):
    """Authenticated caller as resolved from a bearer token."""

    user_id: str
    role: EmployeeRole | None = None
    suspended: bool = False

    @property
    def is_manager(self) -> bool:
        return self.role == EmployeeRole.MANAGER
