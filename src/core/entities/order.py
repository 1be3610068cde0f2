"""Order entity (read-only to the reminder engine)."""

from datetime import datetime

from pydantic import BaseModel

DRAFT_STATUS = "draft"


class Order(BaseModel):
    """Append-only order fact. Draft orders never count as activity."""

    id: str | None = None
    employee_id: str
    location_id: str | None = None
    created_at: datetime
    status: str = "submitted"

    @property
    def is_draft(self) -> bool:
        return self.status == DRAFT_STATUS
