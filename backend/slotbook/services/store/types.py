"""Value types passed across the store boundary. Callers never hold ORM rows."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from slotbook.core.constants import CHANNEL_EMAIL, CHANNEL_PUSH, CHANNEL_SMS

# channel -> (opt-in column, sent-flag column)
CHANNEL_FIELDS = {
    CHANNEL_EMAIL: ("receive_email", "email_sent"),
    CHANNEL_SMS: ("receive_sms_notification", "sms_sent"),
    CHANNEL_PUSH: ("receive_push_notification", "push_notification_sent"),
}


@dataclass(frozen=True)
class ReservationRecord:
    id: str
    start_time: str
    end_time: str
    reservation_date: date
    status: str
    email: str = ""
    phone: str = ""
    push_notification_key: str = ""
    receive_email: bool = False
    receive_sms_notification: bool = False
    receive_push_notification: bool = False
    email_sent: bool = False
    sms_sent: bool = False
    push_notification_sent: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def wants(self, channel: str) -> bool:
        return bool(getattr(self, CHANNEL_FIELDS[channel][0]))

    def sent(self, channel: str) -> bool:
        return bool(getattr(self, CHANNEL_FIELDS[channel][1]))

    def contact_for(self, channel: str) -> str:
        if channel == CHANNEL_EMAIL:
            return self.email
        if channel == CHANNEL_SMS:
            return self.phone
        return self.push_notification_key

    def to_response(self) -> dict[str, Any]:
        """API shape; sent flags and the date are internal and not exposed."""
        return {
            "id": self.id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "email": self.email,
            "phone": self.phone,
            "pushNotificationKey": self.push_notification_key,
            "status": self.status,
            "createdTime": self.created_at.isoformat() if self.created_at else None,
            "updatedTime": self.updated_at.isoformat() if self.updated_at else None,
            "receiveEmail": self.receive_email,
            "receiveSmsNotification": self.receive_sms_notification,
            "receivePushNotification": self.receive_push_notification,
        }


@dataclass
class ReservationPatch:
    """Partial update. None means "leave unchanged"; end_time is always derived."""

    start_time: str | None = None
    email: str | None = None
    phone: str | None = None
    push_notification_key: str | None = None
    receive_email: bool | None = None
    receive_sms_notification: bool | None = None
    receive_push_notification: bool | None = None

    def changes(self) -> dict[str, Any]:
        return {
            k: v
            for k, v in (
                ("start_time", self.start_time),
                ("email", self.email),
                ("phone", self.phone),
                ("push_notification_key", self.push_notification_key),
                ("receive_email", self.receive_email),
                ("receive_sms_notification", self.receive_sms_notification),
                ("receive_push_notification", self.receive_push_notification),
            )
            if v is not None
        }
