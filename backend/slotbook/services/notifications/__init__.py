from slotbook.services.notifications.base import NotificationGateway
from slotbook.services.notifications.gateway import ChannelGateway
from slotbook.services.notifications.types import (
    BatchRequest,
    NotificationMessage,
    NotificationOptions,
    NotifyConfig,
    SendResult,
)

__all__ = [
    "NotificationGateway",
    "ChannelGateway",
    "BatchRequest",
    "NotificationMessage",
    "NotificationOptions",
    "NotifyConfig",
    "SendResult",
]
