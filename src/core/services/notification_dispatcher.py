"""
Notification Dispatcher.

Fans one reminder out to the in-app and push channels and records exactly
one immutable event per attempt, whatever the outcome.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.config import get_logger
from src.core.entities.employee import Employee
from src.core.entities.reminder import (
    ChannelConfig,
    DeliveryChannel,
    InAppNotification,
    PushDeliveryResult,
    PushStatus,
    ReminderEvent,
    ReminderEventType,
    ReminderSource,
    ReminderThread,
)
from src.core.exceptions import InAppDeliveryError, PushGatewayError
from src.core.interfaces.push import IPushGateway, PushMessage
from src.core.interfaces.storage import INotificationStore, IReminderStore

logger = get_logger(__name__)

REMINDER_NOTIFICATION_TYPE = "employee_reminder"
DEFAULT_TITLE = "Order reminder"
DEFAULT_BODY = "Please submit your order when you have a moment."


@dataclass
class DispatchResult:
    """Outcome of one dispatch attempt."""

    event: ReminderEvent
    push: PushDeliveryResult
    notifications_enabled: bool
    in_app_notification_id: str | None = None
    channels_attempted: list[DeliveryChannel] = field(default_factory=list)


def chunked(items: list[Any], size: int) -> list[list[Any]]:
    size = max(1, size)
    return [items[i:i + size] for i in range(0, len(items), size)]


def aggregate_push_status(success_count: int, failure_count: int) -> PushStatus:
    if failure_count == 0:
        return PushStatus.SENT
    if success_count == 0:
        return PushStatus.FAILED
    return PushStatus.PARTIAL


class NotificationDispatcher:
    """
    Single send path for manual and recurring reminders.

    The two differ only in the ``source`` recorded on the event.
    """

    def __init__(
        self,
        reminder_store: IReminderStore,
        notification_store: INotificationStore,
        push_gateway: IPushGateway,
        title: str = DEFAULT_TITLE,
        default_body: str = DEFAULT_BODY,
        chunk_size: int = 100,
    ) -> None:
        self._reminders = reminder_store
        self._notifications = notification_store
        self._push = push_gateway
        self._title = title
        self._default_body = default_body
        self._chunk_size = chunk_size

    def build_body(self, message: str | None) -> str:
        body = (message or "").strip()
        return body or self._default_body

    async def dispatch(
        self,
        thread: ReminderThread,
        employee: Employee,
        channels: ChannelConfig,
        message: str | None,
        source: ReminderSource,
        event_type: ReminderEventType,
        now: datetime,
    ) -> DispatchResult:
        """
        Deliver on the requested channels and write the event.

        Raises:
            InAppDeliveryError: The in-app notification could not be stored.
                The event is written (with the error) before raising.
        """
        body = self.build_body(message)
        notifications_enabled = employee.notifications_enabled
        channels_attempted: list[DeliveryChannel] = []
        in_app_notification_id: str | None = None
        push_result = PushDeliveryResult()
        in_app_error: Exception | None = None

        if channels.in_app:
            channels_attempted.append(DeliveryChannel.IN_APP)
            try:
                notification = await self._notifications.create_notification(
                    InAppNotification(
                        user_id=employee.id,
                        title=self._title,
                        body=body,
                        notification_type=REMINDER_NOTIFICATION_TYPE,
                        payload={
                            "reminder_id": thread.id,
                            "source": source.value,
                            "location_id": thread.location_id,
                            "manager_id": thread.manager_id,
                        },
                        created_at=now,
                    )
                )
                in_app_notification_id = notification.id
            except Exception as e:
                in_app_error = e
                logger.error(
                    "in_app_notification_failed",
                    reminder_id=thread.id,
                    employee_id=employee.id,
                    error=str(e),
                )

        if in_app_error is None and channels.push:
            if not notifications_enabled:
                push_result.status = PushStatus.PUSH_DISABLED
            else:
                channels_attempted.append(DeliveryChannel.PUSH)
                push_result = await self._send_push(thread, employee, body, source)

        delivery_result: dict[str, Any] = {
            "source": source.value,
            "notifications_enabled": notifications_enabled,
            "in_app_notification_id": in_app_notification_id,
            "push": push_result.model_dump(mode="json"),
        }
        if in_app_error is not None:
            delivery_result["error"] = str(in_app_error)

        event = await self._reminders.add_event(
            ReminderEvent(
                reminder_id=thread.id,
                event_type=event_type,
                sent_at=now,
                channels_attempted=channels_attempted,
                delivery_result=delivery_result,
            )
        )

        if in_app_error is not None:
            raise InAppDeliveryError(thread.id, str(in_app_error)) from in_app_error

        logger.info(
            "reminder_dispatched",
            reminder_id=thread.id,
            employee_id=employee.id,
            event_type=event_type.value,
            source=source.value,
            channels=[c.value for c in channels_attempted],
            push_status=push_result.status.value,
        )

        return DispatchResult(
            event=event,
            push=push_result,
            notifications_enabled=notifications_enabled,
            in_app_notification_id=in_app_notification_id,
            channels_attempted=channels_attempted,
        )

    async def _send_push(
        self,
        thread: ReminderThread,
        employee: Employee,
        body: str,
        source: ReminderSource,
    ) -> PushDeliveryResult:
        result = PushDeliveryResult(attempted=True)

        tokens = await self._notifications.list_active_push_tokens(employee.id)
        sanitized: list[str] = []
        for token in tokens:
            value = token.sanitized_token
            if value and value not in sanitized:
                sanitized.append(value)

        result.token_count = len(sanitized)
        if not sanitized:
            result.status = PushStatus.NO_TOKENS
            return result

        data = {
            "type": REMINDER_NOTIFICATION_TYPE,
            "reminder_id": thread.id,
            "source": source.value,
            "location_id": thread.location_id,
        }

        for index, chunk in enumerate(chunked(sanitized, self._chunk_size)):
            messages = [
                PushMessage(to=token, title=self._title, body=body, data=data)
                for token in chunk
            ]
            try:
                tickets = await self._push.send(messages)
            except PushGatewayError as e:
                result.failure_count += len(messages)
                result.details.append({"chunk": index, "error": e.message})
                logger.warning(
                    "push_chunk_failed",
                    reminder_id=thread.id,
                    chunk=index,
                    size=len(messages),
                    error=e.message,
                )
                continue

            ok = sum(1 for ticket in tickets[:len(messages)] if ticket.ok)
            result.success_count += ok
            # Missing tickets count as failures
            result.failure_count += len(messages) - ok
            result.details.append({
                "chunk": index,
                "tickets": [ticket.model_dump(exclude_none=True) for ticket in tickets],
            })

        result.status = aggregate_push_status(result.success_count, result.failure_count)
        return result
