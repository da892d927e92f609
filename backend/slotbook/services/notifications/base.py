"""Protocol for the outbound message channel."""
from concurrent.futures import Future
from typing import Protocol

from pydantic import BaseModel

from slotbook.services.notifications.types import SendResult


class NotificationGateway(Protocol):
    """Accepts a typed payload for a pattern key; the outcome arrives later."""

    def send(self, pattern_key: str, message: BaseModel) -> "Future[SendResult]":
        """
        Queue one message. Never blocks on delivery; the returned future resolves
        to SendResult(success, message) and does not raise for transport errors.
        """
        ...
