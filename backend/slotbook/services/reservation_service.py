"""
Reservation lifecycle: queued -> successful | cancelled | rejected.

create() never raises: every failure comes back as CreateReservationResult(status="error").
get/update/cancel/reject raise ReservationError subclasses for the caller to translate.
Confirmation emails are fire-and-forget; their outcome is only logged.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Callable

from pydantic import BaseModel

from slotbook.core.constants import (
    NO_REASON_PROVIDED,
    PATTERN_EMAIL,
    STATUS_CANCELLED,
    STATUS_QUEUED,
    STATUS_REJECTED,
    STATUS_SUCCESSFUL,
)
from slotbook.core.errors import InvalidFormat, InvalidState, NotFound, ReservationError, SlotConflict
from slotbook.core.slot_clock import format_slot, now_in, parse_slot_start, slot_end, today
from slotbook.services.notifications import templates
from slotbook.services.notifications.base import NotificationGateway
from slotbook.services.notifications.types import NotificationOptions, SendResult
from slotbook.services.store.base import ReservationStore
from slotbook.services.store.types import ReservationPatch, ReservationRecord

logger = logging.getLogger(__name__)

# Per-start-time locks close the check-then-write race inside one process;
# the partial unique index covers writers in other processes. One lock per
# start time (96 at most), shared across dates.
_slot_locks: dict[str, threading.Lock] = {}
_slot_locks_guard = threading.Lock()


def _slot_lock(start_time: str) -> threading.Lock:
    with _slot_locks_guard:
        return _slot_locks.setdefault(start_time, threading.Lock())


class CreateReservationRequest(BaseModel):
    startTime: str
    email: str = ""
    phone: str = ""
    pushNotificationKey: str = ""
    receiveEmail: bool = False
    receiveSmsNotification: bool = False
    receivePushNotification: bool = False


@dataclass(frozen=True)
class CreateReservationResult:
    status: str  # success | error
    record: ReservationRecord | None = None
    message: str | None = None
    status_code: int = 201

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_response(self) -> dict[str, Any]:
        if self.ok and self.record is not None:
            return {"status": "success", "record": self.record.to_response()}
        return {"status": "error", "message": self.message}


class ReservationService:
    def __init__(
        self,
        store: ReservationStore,
        gateway: NotificationGateway,
        tz: tzinfo,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.gateway = gateway
        self.tz = tz
        self._clock = clock or (lambda: now_in(tz))

    def create(self, request: CreateReservationRequest) -> CreateReservationResult:
        try:
            start = format_slot(parse_slot_start(request.startTime))
            day = today(self._clock())
            with _slot_lock(start):
                if self.store.find_active_by_slot(start, day):
                    raise SlotConflict()
                record = self.store.create(
                    {
                        "start_time": start,
                        "end_time": format_slot(slot_end(parse_slot_start(start))),
                        "reservation_date": day,
                        "email": request.email,
                        "phone": request.phone,
                        "push_notification_key": request.pushNotificationKey,
                        "receive_email": request.receiveEmail,
                        "receive_sms_notification": request.receiveSmsNotification,
                        "receive_push_notification": request.receivePushNotification,
                        "status": STATUS_QUEUED,
                    }
                )
        except ReservationError as e:
            logger.warning("Failed to create reservation: %s", e.message)
            return CreateReservationResult(status="error", message=e.message, status_code=e.status_code)
        except Exception as e:
            logger.exception("Failed to create reservation: %s", e)
            return CreateReservationResult(status="error", message=str(e), status_code=500)

        logger.info("Reservation created: %s", record.id)
        self._notify(templates.created_email(record), "Email")
        return CreateReservationResult(status="success", record=record)

    def get(self, reservation_id: str) -> ReservationRecord:
        record = self.store.find_by_id(reservation_id)
        if record is None:
            raise NotFound()
        return record

    def list_all(self) -> list[ReservationRecord]:
        return self.store.find_all()

    def update(self, reservation_id: str, patch: ReservationPatch) -> ReservationRecord:
        current = self._queued(reservation_id, "update")
        changes = patch.changes()
        new_start = changes.get("start_time")
        if new_start is not None:
            new_start = format_slot(parse_slot_start(new_start))
            changes["start_time"] = new_start
        if new_start is not None and new_start != current.start_time:
            day = current.reservation_date
            with _slot_lock(new_start):
                if self.store.find_active_by_slot(new_start, day, exclude_id=reservation_id):
                    raise SlotConflict()
                changes["end_time"] = format_slot(slot_end(parse_slot_start(new_start)))
                updated = self._write(reservation_id, changes, "update")
        else:
            updated = self._write(reservation_id, changes, "update")

        logger.info("Reservation updated: %s", reservation_id)
        self._notify(templates.updated_email(updated), "Update")
        return updated

    def cancel(self, reservation_id: str, reason: str | None = None) -> ReservationRecord:
        self._queued(reservation_id, "cancel")
        updated = self._write(reservation_id, {"status": STATUS_CANCELLED}, "cancel")
        reason = (reason or "").strip() or NO_REASON_PROVIDED
        self._notify(templates.cancelled_email(updated, reason), "Cancellation")
        logger.info("Reservation cancelled: %s", reservation_id)
        return updated

    def reject(self, reservation_id: str, reason: str) -> ReservationRecord:
        reason = (reason or "").strip()
        if not reason:
            raise InvalidFormat("A rejection reason is required")
        self._queued(reservation_id, "reject")
        updated = self._write(reservation_id, {"status": STATUS_REJECTED}, "reject")
        self._notify(templates.rejected_email(updated, reason), "Rejection")
        logger.info("Reservation rejected: %s", reservation_id)
        return updated

    def complete(self, reservation_id: str) -> ReservationRecord:
        """Slot start has passed: queued -> successful. Driven only by the reminder dispatcher."""
        self._queued(reservation_id, "complete")
        updated = self._write(reservation_id, {"status": STATUS_SUCCESSFUL}, "complete")
        logger.info("Reservation completed: %s", reservation_id)
        return updated

    def _queued(self, reservation_id: str, action: str) -> ReservationRecord:
        record = self.get(reservation_id)
        if record.status != STATUS_QUEUED:
            raise _not_queued(action)
        return record

    def _write(self, reservation_id: str, changes: dict[str, Any], action: str) -> ReservationRecord:
        """
        Apply changes only while the reservation is still queued. The status may have
        moved on since _queued() read it (e.g. the dispatcher completed it).
        """
        updated = self.store.transition(reservation_id, STATUS_QUEUED, changes)
        if updated is None:
            self.get(reservation_id)
            logger.info("Reservation %s left QUEUED before %s was applied", reservation_id, action)
            raise _not_queued(action)
        return updated

    def _notify(self, options: NotificationOptions, label: str) -> None:
        try:
            future = self.gateway.send(PATTERN_EMAIL, options)
        except Exception as e:
            logger.warning("%s notification could not be queued: %s", label, e, exc_info=True)
            return
        future.add_done_callback(lambda f: _log_outcome(label, f))


def _not_queued(action: str) -> InvalidState:
    return InvalidState(f"Can only {action} reservations with QUEUED status")


def _log_outcome(label: str, future: "Future[SendResult]") -> None:
    try:
        result = future.result()
    except Exception as e:
        logger.warning("%s notification failed: %s", label, e)
        return
    logger.info("%s notification sent: success=%s message=%s", label, result.success, result.message)
