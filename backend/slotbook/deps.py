"""
Process-wide collaborators, built once from settings and injected where needed.
"""
from functools import lru_cache
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.orm import Session

from slotbook.config import settings
from slotbook.core.slot_clock import resolve_timezone
from slotbook.db.session import get_db
from slotbook.services.notifications import ChannelGateway, NotifyConfig
from slotbook.services.reminder_dispatcher import ReminderDispatcher
from slotbook.services.reservation_service import ReservationService
from slotbook.services.store import ReservationRepository, open_reservation_store


@lru_cache
def get_timezone() -> ZoneInfo:
    return resolve_timezone(settings.timezone)


@lru_cache
def get_gateway() -> ChannelGateway:
    return ChannelGateway(NotifyConfig.from_settings(settings))


@lru_cache
def get_dispatcher() -> ReminderDispatcher:
    return ReminderDispatcher(
        open_reservation_store,
        get_gateway(),
        get_timezone(),
        lookahead_minutes=settings.dispatch_lookahead_minutes,
        lookback_minutes=settings.dispatch_lookback_minutes,
    )


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    tz = get_timezone()
    return ReservationService(ReservationRepository(db, tz), get_gateway(), tz)
