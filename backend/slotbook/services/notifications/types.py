"""Payloads accepted by the notification gateway, one shape for every pattern key."""
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field

# Confirmation types get an admin copy; reminder types do not
NotificationType = Literal["create", "update", "cancel", "reject", "email", "sms", "push"]
CONFIRMATION_TYPES = ("create", "update", "cancel", "reject")


class NotificationOptions(BaseModel):
    type: NotificationType
    to: str = ""
    subject: str = ""
    text: str | None = None
    html: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def content(self) -> str:
        return self.text or self.html or ""


class NotificationMessage(BaseModel):
    """One entry of a send.batch request."""

    channel: Literal["email", "sms", "push"]
    options: NotificationOptions


class BatchRequest(BaseModel):
    notifications: list[NotificationMessage] = Field(default_factory=list)


@dataclass(frozen=True)
class SendResult:
    success: bool
    message: str
    results: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class NotifyConfig:
    """Transport settings handed to the gateway at construction."""

    admin_email: str
    transport: str = "log"  # log | live
    notify_from: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from_number: str = ""
    apns_key_id: str = ""
    apns_team_id: str = ""
    apns_bundle_id: str = ""
    apns_key_p8_path: str = ""
    apns_key_p8_base64: str = ""
    apns_use_sandbox: bool = True
    max_workers: int = 4

    @classmethod
    def from_settings(cls, s: Any) -> "NotifyConfig":
        return cls(
            admin_email=s.admin_email,
            transport=s.notify_transport,
            notify_from=s.notify_from,
            smtp_host=s.smtp_host,
            smtp_port=s.smtp_port,
            smtp_user=s.smtp_user,
            smtp_password=s.smtp_password,
            twilio_account_sid=s.twilio_account_sid,
            twilio_auth_token=s.twilio_auth_token,
            twilio_from_number=s.twilio_from_number,
            apns_key_id=s.apns_key_id,
            apns_team_id=s.apns_team_id,
            apns_bundle_id=s.apns_bundle_id,
            apns_key_p8_path=s.apns_key_p8_path,
            apns_key_p8_base64=s.apns_key_p8_base64,
            apns_use_sandbox=s.apns_use_sandbox,
            max_workers=s.notify_max_workers,
        )
