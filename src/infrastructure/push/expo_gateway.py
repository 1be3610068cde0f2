"""
Expo push service client.

Posts one chunk of messages as a JSON array and maps the response to one
ticket per message. Transport errors and 5xx answers are retried with
exponential backoff; anything still failing becomes PushGatewayError.
"""

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger, get_settings
from src.core.exceptions import PushGatewayError
from src.core.interfaces.push import IPushGateway, PushMessage, PushTicket

logger = get_logger(__name__)


class _RetryableStatusError(Exception):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code


class ExpoPushGateway(IPushGateway):
    """httpx client for the Expo push API."""

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings().push
        self.endpoint = endpoint or settings.endpoint
        self.timeout = timeout if timeout is not None else settings.timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay
        self.access_token = access_token or settings.access_token
        self._transport = transport

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "push_gateway_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _post(self, payload: list[dict[str, Any]]) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.endpoint,
                json=payload,
                headers=headers,
            )
        if response.status_code >= 500:
            raise _RetryableStatusError(response.status_code, response.text[:200])
        return response

    async def send(self, messages: list[PushMessage]) -> list[PushTicket]:
        if not messages:
            return []

        payload = [m.model_dump(by_alias=True) for m in messages]
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(
                multiplier=self.retry_delay,
                min=self.retry_delay,
                max=self.retry_delay * 8,
            ),
            retry=retry_if_exception_type((httpx.TransportError, _RetryableStatusError)),
            before_sleep=self._log_retry,
        )

        try:
            response = await retrying(self._post, payload)
        except RetryError as e:
            cause = e.last_attempt.exception()
            status = getattr(cause, "status_code", None)
            logger.error("push_gateway_failed", error=str(cause), status_code=status)
            raise PushGatewayError(str(cause), status_code=status) from cause
        except (httpx.TransportError, _RetryableStatusError) as e:
            status = getattr(e, "status_code", None)
            logger.error("push_gateway_failed", error=str(e), status_code=status)
            raise PushGatewayError(str(e), status_code=status) from e

        if response.status_code >= 400:
            logger.error(
                "push_gateway_rejected",
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise PushGatewayError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        tickets = self.parse_tickets(response)
        logger.info("push_chunk_sent", messages=len(messages), tickets=len(tickets))
        return tickets

    @staticmethod
    def parse_tickets(response: httpx.Response) -> list[PushTicket]:
        """
        Read the ``data`` field as tickets.

        A single ticket object is treated as a one-element list. A body that
        is not JSON yields no tickets, so every message counts as failed.
        """
        try:
            body = response.json()
        except ValueError:
            logger.warning("push_gateway_non_json_response", status_code=response.status_code)
            return []

        data = body.get("data") if isinstance(body, dict) else None
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            return []

        tickets = []
        for item in data:
            if not isinstance(item, dict):
                tickets.append(PushTicket(status="error", message="Malformed ticket"))
                continue
            tickets.append(
                PushTicket(
                    status=str(item.get("status", "error")),
                    id=item.get("id"),
                    message=item.get("message"),
                    details=item.get("details"),
                )
            )
        return tickets


_gateway: ExpoPushGateway | None = None


def get_push_gateway() -> ExpoPushGateway:
    """Get singleton push gateway."""
    global _gateway
    if _gateway is None:
        _gateway = ExpoPushGateway()
    return _gateway
