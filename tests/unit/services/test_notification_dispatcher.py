"""Tests for NotificationDispatcher."""

from unittest.mock import AsyncMock

import pytest

from src.core.entities import (
    ChannelConfig,
    DeliveryChannel,
    DevicePushToken,
    Employee,
    InAppNotification,
    PushStatus,
    ReminderEventType,
    ReminderSource,
    ReminderThread,
)
from src.core.exceptions import InAppDeliveryError, PushGatewayError
from src.core.interfaces.push import PushTicket
from src.core.services.notification_dispatcher import (
    NotificationDispatcher,
    aggregate_push_status,
    chunked,
)
from tests.factories import WEDNESDAY_9AM_LA as NOW


def _token(value: str) -> DevicePushToken:
    return DevicePushToken(user_id="emp-1", expo_push_token=value)


@pytest.fixture
def thread() -> ReminderThread:
    return ReminderThread(id="rem-1", employee_id="emp-1", location_id="loc-1", manager_id="mgr-1")


@pytest.fixture
def reminder_store():
    store = AsyncMock()
    store.add_event.side_effect = lambda event: event.model_copy(update={"id": "evt-1"})
    return store


@pytest.fixture
def notification_store():
    store = AsyncMock()
    store.create_notification.side_effect = lambda n: n.model_copy(update={"id": "ntf-1"})
    store.list_active_push_tokens.return_value = [_token("ExponentPushToken[a]")]
    return store


@pytest.fixture
def gateway():
    gateway = AsyncMock()
    gateway.send.side_effect = lambda messages: [PushTicket(status="ok") for _ in messages]
    return gateway


@pytest.fixture
def dispatcher(reminder_store, notification_store, gateway):
    return NotificationDispatcher(reminder_store, notification_store, gateway, chunk_size=2)


async def _dispatch(dispatcher, thread, employee, channels=None, message=None):
    return await dispatcher.dispatch(
        thread=thread,
        employee=employee,
        channels=channels or ChannelConfig(),
        message=message,
        source=ReminderSource.MANUAL,
        event_type=ReminderEventType.SENT,
        now=NOW,
    )


def test_chunked():
    assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert chunked([1], 0) == [[1]]


def test_aggregate_push_status():
    assert aggregate_push_status(3, 0) == PushStatus.SENT
    assert aggregate_push_status(0, 2) == PushStatus.FAILED
    assert aggregate_push_status(1, 1) == PushStatus.PARTIAL


class TestDispatch:
    async def test_both_channels(self, dispatcher, thread, employee, reminder_store, notification_store):
        result = await _dispatch(dispatcher, thread, employee)

        assert result.in_app_notification_id == "ntf-1"
        assert result.channels_attempted == [DeliveryChannel.IN_APP, DeliveryChannel.PUSH]
        assert result.push.status == PushStatus.SENT
        assert result.push.success_count == 1
        assert result.event.id == "evt-1"

        notification: InAppNotification = notification_store.create_notification.call_args.args[0]
        assert notification.payload["reminder_id"] == "rem-1"
        assert notification.body == "Please submit your order when you have a moment."

        event = reminder_store.add_event.call_args.args[0]
        assert event.delivery_result["source"] == "manual"
        assert event.delivery_result["push"]["status"] == "sent"

    async def test_custom_message_is_trimmed(self, dispatcher, thread, employee, notification_store):
        await _dispatch(dispatcher, thread, employee, message="  Order the buns  ")
        notification = notification_store.create_notification.call_args.args[0]
        assert notification.body == "Order the buns"

    async def test_in_app_failure_writes_event_then_raises(
        self, dispatcher, thread, employee, reminder_store, notification_store, gateway
    ):
        notification_store.create_notification.side_effect = RuntimeError("disk full")

        with pytest.raises(InAppDeliveryError):
            await _dispatch(dispatcher, thread, employee)

        event = reminder_store.add_event.call_args.args[0]
        assert event.delivery_result["error"] == "disk full"
        assert event.channels_attempted == [DeliveryChannel.IN_APP]
        gateway.send.assert_not_called()

    async def test_push_disabled_by_employee(self, dispatcher, thread, gateway):
        employee = Employee(id="emp-1", notifications_enabled=False)
        result = await _dispatch(dispatcher, thread, employee)

        assert result.push.status == PushStatus.PUSH_DISABLED
        assert result.push.attempted is False
        assert result.channels_attempted == [DeliveryChannel.IN_APP]
        gateway.send.assert_not_called()

    async def test_push_not_requested(self, dispatcher, thread, employee, gateway):
        result = await _dispatch(dispatcher, thread, employee, ChannelConfig(push=False))
        assert result.push.status == PushStatus.NOT_REQUESTED
        gateway.send.assert_not_called()

    async def test_push_only(self, dispatcher, thread, employee, notification_store):
        result = await _dispatch(dispatcher, thread, employee, ChannelConfig(in_app=False))
        assert result.channels_attempted == [DeliveryChannel.PUSH]
        assert result.in_app_notification_id is None
        notification_store.create_notification.assert_not_called()

    async def test_no_valid_tokens(self, dispatcher, thread, employee, notification_store, gateway):
        notification_store.list_active_push_tokens.return_value = [_token("garbage")]
        result = await _dispatch(dispatcher, thread, employee)

        assert result.push.status == PushStatus.NO_TOKENS
        assert result.push.attempted is True
        gateway.send.assert_not_called()


class TestPushChunks:
    async def test_tokens_are_deduplicated_and_chunked(
        self, dispatcher, thread, employee, notification_store, gateway
    ):
        notification_store.list_active_push_tokens.return_value = [
            _token("ExponentPushToken[a]"),
            _token(" ExponentPushToken[a] "),
            _token("ExponentPushToken[b]"),
            _token("ExpoPushToken[c]"),
        ]
        result = await _dispatch(dispatcher, thread, employee)

        assert result.push.token_count == 3
        assert gateway.send.await_count == 2
        assert result.push.success_count == 3
        assert len(result.push.details) == 2

    async def test_failed_chunk_counts_every_message(
        self, dispatcher, thread, employee, notification_store, gateway
    ):
        notification_store.list_active_push_tokens.return_value = [
            _token("ExponentPushToken[a]"),
            _token("ExponentPushToken[b]"),
            _token("ExponentPushToken[c]"),
        ]
        ok_tickets = [PushTicket(status="ok")]
        gateway.send.side_effect = [PushGatewayError("timeout"), ok_tickets]

        result = await _dispatch(dispatcher, thread, employee)

        assert result.push.failure_count == 2
        assert result.push.success_count == 1
        assert result.push.status == PushStatus.PARTIAL
        assert result.push.details[0]["error"] == "Push gateway error: timeout"

    async def test_missing_tickets_count_as_failures(
        self, dispatcher, thread, employee, notification_store, gateway
    ):
        notification_store.list_active_push_tokens.return_value = [
            _token("ExponentPushToken[a]"),
            _token("ExponentPushToken[b]"),
        ]
        gateway.send.side_effect = None
        gateway.send.return_value = [PushTicket(status="ok")]

        result = await _dispatch(dispatcher, thread, employee)

        assert result.push.success_count == 1
        assert result.push.failure_count == 1
        assert result.push.status == PushStatus.PARTIAL

    async def test_error_tickets(self, dispatcher, thread, employee, gateway):
        gateway.send.side_effect = None
        gateway.send.return_value = [
            PushTicket(status="error", message="DeviceNotRegistered")
        ]
        result = await _dispatch(dispatcher, thread, employee)
        assert result.push.status == PushStatus.FAILED
