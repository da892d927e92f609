"""
Notification gateway: routes pattern keys (send.email, send.sms, send.push, send.admin,
send.batch) to SMTP / Twilio / APNs on a thread pool and reports each outcome as a
SendResult future.

transport="log" prints every message and reports success (local dev, no credentials).
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable

from pydantic import BaseModel

from slotbook.core.constants import (
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    CHANNEL_SMS,
    PATTERN_ADMIN,
    PATTERN_BATCH,
    PATTERN_EMAIL,
    PATTERN_PUSH,
    PATTERN_SMS,
)
from slotbook.services.notifications import email_notify, push, sms
from slotbook.services.notifications.templates import admin_copy
from slotbook.services.notifications.types import (
    CONFIRMATION_TYPES,
    BatchRequest,
    NotificationOptions,
    NotifyConfig,
    SendResult,
)

logger = logging.getLogger(__name__)

PUSH_TITLE = "Upcoming call"


class ChannelGateway:
    def __init__(self, config: NotifyConfig, executor: ThreadPoolExecutor | None = None):
        self.config = config
        self._executor = executor or ThreadPoolExecutor(
            max_workers=config.max_workers,
            thread_name_prefix="notify",
        )
        self._handlers: dict[str, Callable[[BaseModel], SendResult]] = {
            PATTERN_EMAIL: self.deliver_email,
            PATTERN_SMS: self.deliver_sms,
            PATTERN_PUSH: self.deliver_push,
            PATTERN_ADMIN: self.deliver_admin,
            PATTERN_BATCH: self.deliver_batch,
        }

    def send(self, pattern_key: str, message: BaseModel) -> "Future[SendResult]":
        handler = self._handlers.get(pattern_key)
        if handler is None:
            raise ValueError(f"Unknown pattern key {pattern_key!r}")
        return self._executor.submit(self._run, pattern_key, handler, message)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)

    def health(self) -> dict[str, str]:
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    def _run(self, pattern_key: str, handler: Callable[[BaseModel], SendResult], message: BaseModel) -> SendResult:
        try:
            return handler(message)
        except Exception as e:
            logger.exception("%s handler failed: %s", pattern_key, e)
            return SendResult(success=False, message=f"Failed to handle {pattern_key}")

    # --- Channels ---

    def _email(self, to: str, subject: str, text: str | None, html: str | None = None) -> bool:
        if self.config.transport == "log":
            logger.info("[EMAIL] To: %s, Subject: %s, Content: %s", to, subject, text or html)
            return True
        return email_notify.send_email(self.config, to, subject, text=text, html=html)

    def _sms(self, to: str, text: str) -> bool:
        if self.config.transport == "log":
            logger.info("[SMS] To: %s, Content: %s", to, text)
            return True
        return sms.send_sms(self.config, to, text)

    def _push(self, key: str, text: str) -> bool:
        if self.config.transport == "log":
            logger.info("[PUSH] Key: %s, Content: %s", key, text)
            return True
        return push.send_apns(self.config, key, PUSH_TITLE, text)

    def deliver_email(self, options: NotificationOptions) -> SendResult:
        logger.info("Received email request for %s", options.to)
        if not self._email(options.to, options.subject, options.text, options.html):
            return SendResult(success=False, message="Failed to send email")
        if options.type in CONFIRMATION_TYPES:
            self.deliver_admin(options)
        return SendResult(success=True, message="Email sent successfully")

    def deliver_sms(self, options: NotificationOptions) -> SendResult:
        if not self._sms(options.to, options.content):
            return SendResult(success=False, message="Failed to send SMS")
        return SendResult(success=True, message="SMS sent successfully")

    def deliver_push(self, options: NotificationOptions) -> SendResult:
        if not self._push(options.to, options.content):
            return SendResult(success=False, message="Failed to send push notification")
        return SendResult(success=True, message="Push notification sent successfully")

    def deliver_admin(self, options: NotificationOptions) -> SendResult:
        """Copy to the configured admin address. A failed copy is logged, not propagated."""
        subject, text = admin_copy(options)
        if not self._email(self.config.admin_email, subject, text):
            logger.warning("Admin notification failed for %r", subject)
            return SendResult(success=False, message="Failed to send admin notification")
        return SendResult(success=True, message="Admin notification sent successfully")

    def deliver_batch(self, request: BatchRequest) -> SendResult:
        """Each entry is delivered independently; one failure does not stop the rest."""
        logger.info("Received batch notification request with %s notifications", len(request.notifications))
        routes = {
            CHANNEL_EMAIL: self.deliver_email,
            CHANNEL_SMS: self.deliver_sms,
            CHANNEL_PUSH: self.deliver_push,
        }
        results = []
        for item in request.notifications:
            try:
                outcome = routes[item.channel](item.options)
            except Exception as e:
                logger.exception("Batch %s to %s failed: %s", item.channel, item.options.to, e)
                outcome = SendResult(success=False, message=str(e))
            results.append({"type": item.channel, "recipient": item.options.to, "success": outcome.success})
        ok = sum(1 for r in results if r["success"])
        logger.info("Batch processing completed: %s/%s notifications sent successfully", ok, len(results))
        return SendResult(
            success=ok == len(results),
            message=f"{ok}/{len(results)} notifications sent successfully",
            results=results,
        )
