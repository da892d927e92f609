"""
SQLAlchemy reservation store. Each write commits; unique-index violations on the
active-slot index come back as SlotConflict.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from slotbook.config import settings
from slotbook.core.constants import STATUS_CANCELLED, STATUS_QUEUED
from slotbook.core.errors import SlotConflict
from slotbook.core.slot_clock import combine, parse_slot_start, resolve_timezone
from slotbook.db.session import SessionLocal
from slotbook.models.reservation import Reservation
from slotbook.services.store.types import CHANNEL_FIELDS, ReservationRecord

logger = logging.getLogger(__name__)

_WRITABLE = frozenset(
    {
        "start_time",
        "end_time",
        "reservation_date",
        "email",
        "phone",
        "push_notification_key",
        "status",
        "receive_email",
        "receive_sms_notification",
        "receive_push_notification",
    }
)


def _to_record(row: Reservation) -> ReservationRecord:
    return ReservationRecord(
        id=row.id,
        start_time=row.start_time,
        end_time=row.end_time,
        reservation_date=row.reservation_date,
        status=row.status,
        email=row.email or "",
        phone=row.phone or "",
        push_notification_key=row.push_notification_key or "",
        receive_email=bool(row.receive_email),
        receive_sms_notification=bool(row.receive_sms_notification),
        receive_push_notification=bool(row.receive_push_notification),
        email_sent=bool(row.email_sent),
        sms_sent=bool(row.sms_sent),
        push_notification_sent=bool(row.push_notification_sent),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _is_active_slot_violation(exc: IntegrityError) -> bool:
    msg = str(exc.orig).lower()
    return "uq_reservations_active_slot" in msg or (
        "unique" in msg and "start_time" in msg and "reservation_date" in msg
    )


class ReservationRepository:
    def __init__(self, db: Session, tz: tzinfo | None = None):
        self.db = db
        self.tz = tz or resolve_timezone(settings.timezone)

    def find_by_id(self, reservation_id: str) -> ReservationRecord | None:
        row = self.db.query(Reservation).filter(Reservation.id == reservation_id).first()
        return _to_record(row) if row else None

    def find_all(self) -> list[ReservationRecord]:
        rows = self.db.query(Reservation).order_by(Reservation.created_at.desc()).all()
        return [_to_record(r) for r in rows]

    def find_active_by_slot(
        self,
        start_time: str,
        day: date,
        exclude_id: str | None = None,
    ) -> ReservationRecord | None:
        q = self.db.query(Reservation).filter(
            Reservation.start_time == start_time,
            Reservation.reservation_date == day,
            Reservation.status != STATUS_CANCELLED,
        )
        if exclude_id is not None:
            q = q.filter(Reservation.id != exclude_id)
        row = q.first()
        return _to_record(row) if row else None

    def find_upcoming(
        self,
        now: datetime,
        lookahead_minutes: int,
        lookback_minutes: int,
    ) -> list[ReservationRecord]:
        earliest = now - timedelta(minutes=lookback_minutes)
        latest = now + timedelta(minutes=lookahead_minutes)
        # Narrow by date in SQL, then by exact slot instant here (time is stored as HH:mm text)
        rows = (
            self.db.query(Reservation)
            .filter(
                Reservation.status == STATUS_QUEUED,
                Reservation.reservation_date >= earliest.astimezone(self.tz).date(),
                Reservation.reservation_date <= latest.astimezone(self.tz).date(),
            )
            .order_by(Reservation.reservation_date.asc(), Reservation.start_time.asc())
            .all()
        )
        out = []
        for row in rows:
            slot_at = combine(row.reservation_date, parse_slot_start(row.start_time), self.tz)
            if earliest <= slot_at <= latest:
                out.append(_to_record(row))
        return out

    def create(self, fields: dict[str, Any]) -> ReservationRecord:
        now = datetime.now(timezone.utc)
        values = {k: v for k, v in fields.items() if k in _WRITABLE}
        row = Reservation(
            id=str(uuid.uuid4()),
            email_sent=False,
            sms_sent=False,
            push_notification_sent=False,
            created_at=now,
            updated_at=now,
            **values,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_active_slot_violation(e):
                logger.info("Active-slot index rejected %s on %s", values.get("start_time"), values.get("reservation_date"))
                raise SlotConflict() from e
            raise
        self.db.refresh(row)
        return _to_record(row)

    def transition(
        self,
        reservation_id: str,
        from_status: str,
        fields: dict[str, Any],
    ) -> ReservationRecord | None:
        for key in fields:
            if key not in _WRITABLE:
                raise ValueError(f"Field {key!r} cannot be updated")
        values = {getattr(Reservation, k): v for k, v in fields.items()}
        values[Reservation.updated_at] = datetime.now(timezone.utc)
        # Single conditional UPDATE: a row that left from_status meanwhile is not touched
        try:
            matched = (
                self.db.query(Reservation)
                .filter(Reservation.id == reservation_id, Reservation.status == from_status)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_active_slot_violation(e):
                raise SlotConflict() from e
            raise
        if not matched:
            return None
        return self.find_by_id(reservation_id)

    def mark_sent(self, reservation_id: str, channel: str) -> None:
        flag = CHANNEL_FIELDS[channel][1]
        self.db.query(Reservation).filter(Reservation.id == reservation_id).update(
            {getattr(Reservation, flag): True, Reservation.updated_at: datetime.now(timezone.utc)},
            synchronize_session=False,
        )
        self.db.commit()


@contextmanager
def open_reservation_store() -> Iterator[ReservationRepository]:
    """Own session for background work (scheduler ticks, send callbacks)."""
    db = SessionLocal()
    try:
        yield ReservationRepository(db)
    finally:
        db.close()
