"""
Reminder dispatch: one tick scans upcoming queued reservations and, per reservation,
either completes it (slot start has passed) or sends whichever channel reminders are
due right now.

Lead windows are one minute wide and the tick runs once a minute, so each lead
boundary is observed by exactly one tick. A reminder is marked sent only after the
gateway reports success; a failed send stays unsent and is retried by the next tick
while the window is still open.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime, tzinfo
from functools import partial
from typing import Callable

from slotbook.core.constants import (
    CHANNEL_LEAD_MINUTES,
    CHANNEL_PATTERNS,
    CHANNELS,
    STATUS_QUEUED,
)
from slotbook.core.slot_clock import combine, is_within_lead_window, parse_slot_start
from slotbook.services.notifications import templates
from slotbook.services.notifications.base import NotificationGateway
from slotbook.services.notifications.types import SendResult
from slotbook.services.reservation_service import ReservationService
from slotbook.services.store.base import ReservationStore
from slotbook.services.store.types import ReservationRecord

logger = logging.getLogger(__name__)

StoreScope = Callable[[], AbstractContextManager[ReservationStore]]


@dataclass
class TickSummary:
    scanned: int = 0
    completed: int = 0
    dispatched: int = 0
    errors: int = 0


class ReminderDispatcher:
    def __init__(
        self,
        store_scope: StoreScope,
        gateway: NotificationGateway,
        tz: tzinfo,
        lookahead_minutes: int = 15,
        lookback_minutes: int = 24 * 60,
    ):
        self._store_scope = store_scope
        self.gateway = gateway
        self.tz = tz
        self.lookahead_minutes = lookahead_minutes
        self.lookback_minutes = lookback_minutes
        # (reservation id, channel) with a send still in flight; never resent meanwhile
        self._in_flight: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def in_flight(self) -> set[tuple[str, str]]:
        with self._lock:
            return set(self._in_flight)

    def run_tick(self, now: datetime) -> TickSummary:
        summary = TickSummary()
        with self._store_scope() as store:
            service = ReservationService(store, self.gateway, self.tz, clock=lambda: now)
            upcoming = store.find_upcoming(now, self.lookahead_minutes, self.lookback_minutes)
            summary.scanned = len(upcoming)
            for reservation in upcoming:
                try:
                    self._process(service, reservation, now, summary)
                except Exception as e:
                    summary.errors += 1
                    logger.exception("Reminder tick failed for reservation %s: %s", reservation.id, e)
        if summary.completed or summary.dispatched or summary.errors:
            logger.info(
                "Reminder tick: scanned=%s completed=%s dispatched=%s errors=%s",
                summary.scanned, summary.completed, summary.dispatched, summary.errors,
            )
        return summary

    def _process(
        self,
        service: ReservationService,
        reservation: ReservationRecord,
        now: datetime,
        summary: TickSummary,
    ) -> None:
        if reservation.status != STATUS_QUEUED:
            return
        slot_at = combine(reservation.reservation_date, parse_slot_start(reservation.start_time), self.tz)
        if slot_at <= now:
            service.complete(reservation.id)
            summary.completed += 1
            return

        for channel in CHANNELS:
            if not reservation.wants(channel) or reservation.sent(channel):
                continue
            if not is_within_lead_window(slot_at, now, CHANNEL_LEAD_MINUTES[channel]):
                continue
            queued = self._dispatch(reservation, channel)
            if queued is None:
                continue
            if queued:
                summary.dispatched += 1
            else:
                summary.errors += 1

    def _dispatch(self, reservation: ReservationRecord, channel: str) -> bool | None:
        """Queue one reminder. None when the same reminder is already in flight."""
        key = (reservation.id, channel)
        with self._lock:
            if key in self._in_flight:
                logger.debug("%s reminder for %s still in flight; not resending", channel, reservation.id)
                return None
            self._in_flight.add(key)
        try:
            future = self.gateway.send(CHANNEL_PATTERNS[channel], templates.reminder(channel, reservation))
        except Exception as e:
            self._release(key)
            logger.warning("Could not queue %s reminder for %s: %s", channel, reservation.id, e, exc_info=True)
            return False
        future.add_done_callback(partial(self._on_sent, key))
        return True

    def _on_sent(self, key: tuple[str, str], future: "Future[SendResult]") -> None:
        reservation_id, channel = key
        try:
            result = future.result()
            if not result.success:
                logger.warning("%s reminder for %s failed: %s", channel, reservation_id, result.message)
                return
            with self._store_scope() as store:
                store.mark_sent(reservation_id, channel)
            logger.info("%s reminder sent for %s", channel, reservation_id)
        except Exception as e:
            logger.exception("%s reminder for %s not recorded: %s", channel, reservation_id, e)
        finally:
            self._release(key)

    def _release(self, key: tuple[str, str]) -> None:
        with self._lock:
            self._in_flight.discard(key)
