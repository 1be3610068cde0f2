"""
Send Reminder Use Case.

Manual send from a manager: authorize, load settings once, then hand over
to the shared ReminderSender.
"""

from src.application.dto.requests import SendReminderRequest
from src.application.dto.responses import (
    ReminderEventResponse,
    ReminderThreadResponse,
    SendReminderResponse,
)
from src.application.use_cases.reminder_settings import (
    load_reminder_settings,
    settings_to_response,
)
from src.config import get_logger
from src.core.entities.employee import Requester
from src.core.entities.reminder import ChannelConfig, ReminderEvent, ReminderThread
from src.core.interfaces.storage import IReminderSettingsStore
from src.core.services.access import ensure_manager
from src.core.services.reminder_sender import (
    ReminderSender,
    SendReminderCommand,
    SendReminderResult,
)

logger = get_logger(__name__)


def thread_to_response(thread: ReminderThread) -> ReminderThreadResponse:
    return ReminderThreadResponse(
        id=thread.id or "",
        employee_id=thread.employee_id,
        manager_id=thread.manager_id,
        location_id=thread.location_id,
        status=thread.status,
        created_at=thread.created_at,
        last_reminded_at=thread.last_reminded_at,
        reminder_count=thread.reminder_count,
    )


def event_to_response(event: ReminderEvent) -> ReminderEventResponse:
    return ReminderEventResponse(
        id=event.id or "",
        reminder_id=event.reminder_id,
        event_type=event.event_type,
        sent_at=event.sent_at,
        channels_attempted=event.channels_attempted,
        delivery_result=event.delivery_result,
    )


class SendReminderUseCase:
    """Send one manual reminder."""

    def __init__(
        self,
        sender: ReminderSender | None = None,
        settings_store: IReminderSettingsStore | None = None,
    ):
        self._sender = sender
        self._settings_store = settings_store

    async def _get_sender(self) -> ReminderSender:
        if self._sender is None:
            from src.application.services import get_reminder_sender

            self._sender = await get_reminder_sender()
        return self._sender

    async def _get_settings_store(self) -> IReminderSettingsStore:
        if self._settings_store is None:
            from src.infrastructure.storage.sqlite import get_settings_store

            self._settings_store = await get_settings_store()
        return self._settings_store

    async def execute(
        self,
        request: SendReminderRequest,
        requester: Requester | None,
    ) -> SendReminderResult:
        """
        Raises:
            UnauthorizedError, ForbiddenError: Caller is not an active manager.
            EmployeeNotFoundError, EmployeeSuspendedError: Bad target.
            RateLimitedError: Thread reminded too recently.
        """
        manager = ensure_manager(requester)
        settings = await load_reminder_settings(await self._get_settings_store())
        sender = await self._get_sender()

        channels = (
            ChannelConfig(push=request.channels.push, in_app=request.channels.in_app)
            if request.channels
            else ChannelConfig()
        )

        logger.info(
            "send_reminder_started",
            employee_id=request.employee_id,
            manager_id=manager.user_id,
            source=request.source.value,
            override_rate_limit=request.override_rate_limit,
        )

        return await sender.send(
            SendReminderCommand(
                employee_id=request.employee_id,
                manager_id=manager.user_id,
                location_id=request.location_id,
                message=request.message,
                override_rate_limit=request.override_rate_limit,
                source=request.source,
                channels=channels,
            ),
            settings,
        )

    def to_response(self, result: SendReminderResult) -> SendReminderResponse:
        """Convert result to API response."""
        return SendReminderResponse(
            reminder=thread_to_response(result.reminder),
            event=event_to_response(result.event),
            push=result.push,
            notifications_enabled=result.notifications_enabled,
            in_app_notification_id=result.in_app_notification_id,
            channels_attempted=result.channels_attempted,
            settings=settings_to_response(result.settings),
            warnings=result.warnings,
        )
