"""List Reminder Delivery Events Use Case."""

from src.application.dto.responses import DeliveryEventListResponse, DeliveryEventResponse
from src.application.use_cases.send_reminder import event_to_response
from src.core.entities.employee import Requester
from src.core.entities.reminder import ReminderDeliveryLogEntry
from src.core.interfaces.storage import IReminderStore
from src.core.services.access import ensure_manager

MAX_EVENT_LIMIT = 200


class ListReminderDeliveryEventsUseCase:
    """Recent delivery events, newest first."""

    def __init__(self, reminder_store: IReminderStore | None = None):
        self._reminder_store = reminder_store

    async def _get_reminder_store(self) -> IReminderStore:
        if self._reminder_store is None:
            from src.infrastructure.storage.sqlite import get_reminder_store

            self._reminder_store = await get_reminder_store()
        return self._reminder_store

    async def execute(
        self, requester: Requester | None, limit: int = 50
    ) -> list[ReminderDeliveryLogEntry]:
        ensure_manager(requester)
        limit = max(1, min(MAX_EVENT_LIMIT, limit))
        return await (await self._get_reminder_store()).list_recent_events(limit)

    def to_response(
        self, entries: list[ReminderDeliveryLogEntry], limit: int
    ) -> DeliveryEventListResponse:
        return DeliveryEventListResponse(
            events=[
                DeliveryEventResponse(
                    event=event_to_response(entry.event),
                    employee_id=entry.employee_id,
                    employee_name=entry.employee_name,
                    manager_id=entry.manager_id,
                    location_id=entry.location_id,
                )
                for entry in entries
            ],
            total=len(entries),
            limit=limit,
        )
