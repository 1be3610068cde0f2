"""
Abstract interface for the push gateway.

A gateway takes one chunk of messages and returns one ticket per message
in request order. It may return fewer tickets than messages.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class PushMessage(BaseModel):
    """One message addressed to one device token."""

    to: str
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)
    sound: str = "default"
    priority: str = "high"
    channel_id: str = Field(default="default", serialization_alias="channelId")


class PushTicket(BaseModel):
    """Gateway verdict for one message."""

    status: str
    id: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class IPushGateway(ABC):
    """Push transport."""

    @abstractmethod
    async def send(self, messages: list[PushMessage]) -> list[PushTicket]:
        """
        Send one chunk.

        Raises:
            PushGatewayError: Transport failure or timeout after retries.
        """
        pass
