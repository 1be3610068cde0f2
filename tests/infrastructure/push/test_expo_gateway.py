"""Tests for ExpoPushGateway using httpx.MockTransport."""

import json

import httpx
import pytest

from src.core.exceptions import PushGatewayError
from src.core.interfaces.push import PushMessage
from src.infrastructure.push import ExpoPushGateway

ENDPOINT = "https://push.test/send"


def _messages(count: int = 2) -> list[PushMessage]:
    return [
        PushMessage(to=f"ExponentPushToken[{i}]", title="Order reminder", body="Please order")
        for i in range(count)
    ]


def _gateway(handler, max_retries: int = 2) -> ExpoPushGateway:
    return ExpoPushGateway(
        endpoint=ENDPOINT,
        timeout=1.0,
        max_retries=max_retries,
        retry_delay=0,
        transport=httpx.MockTransport(handler),
    )


class TestSend:
    """Request shape and ticket mapping."""

    async def test_posts_json_array(self):
        """Messages go out as one JSON array with Expo field names."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": [{"status": "ok", "id": "t1"}, {"status": "ok", "id": "t2"}]})

        tickets = await _gateway(handler).send(_messages())

        assert [t.id for t in tickets] == ["t1", "t2"]
        assert all(t.ok for t in tickets)
        body = json.loads(seen[0].content)
        assert body[0]["to"] == "ExponentPushToken[0]"
        assert body[0]["channelId"] == "default"
        assert seen[0].headers["accept"] == "application/json"

    async def test_empty_input_sends_nothing(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert await _gateway(handler).send([]) == []

    async def test_access_token_sent_as_bearer(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": [{"status": "ok", "id": "t1"}]})

        gateway = ExpoPushGateway(
            endpoint=ENDPOINT,
            retry_delay=0,
            access_token="expo-secret",
            transport=httpx.MockTransport(handler),
        )
        await gateway.send(_messages(1))

        assert seen[0].headers["authorization"] == "Bearer expo-secret"

    async def test_error_ticket(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"data": [{"status": "error", "message": "DeviceNotRegistered", "details": {"error": "DeviceNotRegistered"}}]},
            )

        tickets = await _gateway(handler).send(_messages(1))
        assert not tickets[0].ok
        assert tickets[0].details == {"error": "DeviceNotRegistered"}


class TestParseTickets:
    """Lenient response parsing."""

    def test_non_json_body(self):
        assert ExpoPushGateway.parse_tickets(httpx.Response(200, text="<html>")) == []

    def test_single_object_data(self):
        tickets = ExpoPushGateway.parse_tickets(httpx.Response(200, json={"data": {"status": "ok"}}))
        assert len(tickets) == 1
        assert tickets[0].ok

    def test_malformed_items(self):
        tickets = ExpoPushGateway.parse_tickets(httpx.Response(200, json={"data": ["oops"]}))
        assert tickets[0].status == "error"
        assert tickets[0].message == "Malformed ticket"

    def test_missing_data(self):
        assert ExpoPushGateway.parse_tickets(httpx.Response(200, json={"errors": []})) == []


class TestRetries:
    """Transport failures and 5xx answers are retried."""

    async def test_retries_server_errors_then_succeeds(self):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            if calls["count"] < 3:
                return httpx.Response(503, text="unavailable")
            return httpx.Response(200, json={"data": [{"status": "ok"}]})

        tickets = await _gateway(handler).send(_messages(1))
        assert calls["count"] == 3
        assert tickets[0].ok

    async def test_gives_up_after_max_retries(self):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            return httpx.Response(502, text="bad gateway")

        with pytest.raises(PushGatewayError) as exc_info:
            await _gateway(handler, max_retries=1).send(_messages(1))

        assert calls["count"] == 2
        assert exc_info.value.details["status_code"] == 502

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PushGatewayError):
            await _gateway(handler, max_retries=0).send(_messages(1))

    async def test_client_error_is_not_retried(self):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            return httpx.Response(400, json={"errors": [{"code": "VALIDATION_ERROR"}]})

        with pytest.raises(PushGatewayError) as exc_info:
            await _gateway(handler).send(_messages(1))

        assert calls["count"] == 1
        assert exc_info.value.details["status_code"] == 400
