"""
Time-of-day parsing and slot arithmetic. No DB, no I/O.

All instants are timezone-aware and expressed in the one process time zone
(settings.timezone); dates and times of day carry no zone of their own.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from slotbook.core.constants import LEAD_WINDOW_MINUTES, SLOT_MINUTE_MARKS, SLOT_MINUTES
from slotbook.core.errors import (
    MSG_INVALID_FORMAT,
    MSG_INVALID_MINUTES,
    InvalidFormat,
    InvalidMinuteAlignment,
)

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")


def parse_slot_start(value: str) -> time:
    """Parse 'HH:mm' into a time. Minutes must fall on a quarter hour."""
    m = _HHMM.match((value or "").strip())
    if not m:
        raise InvalidFormat(f"{MSG_INVALID_FORMAT}, got {value!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidFormat(f"{MSG_INVALID_FORMAT}, got {value!r}")
    if minutes not in SLOT_MINUTE_MARKS:
        raise InvalidMinuteAlignment(MSG_INVALID_MINUTES)
    return time(hours, minutes)


def format_slot(t: time) -> str:
    return t.strftime("%H:%M")


def slot_end(t: time) -> time:
    """Start + SLOT_MINUTES; 23:45 wraps to 00:00."""
    anchor = datetime.combine(date.min, t)
    return (anchor + timedelta(minutes=SLOT_MINUTES)).time()


def combine(day: date, t: time, tz: tzinfo) -> datetime:
    """Absolute instant the slot starts at."""
    return datetime.combine(day, t, tzinfo=tz)


def is_within_lead_window(target: datetime, now: datetime, lead_minutes: int) -> bool:
    """True iff now is in [target - lead, target - lead + 1 minute)."""
    opens = target - timedelta(minutes=lead_minutes)
    closes = opens + timedelta(minutes=LEAD_WINDOW_MINUTES)
    return opens <= now < closes


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown TIMEZONE {name!r}") from e


def now_in(tz: tzinfo) -> datetime:
    return datetime.now(tz)


def today(now: datetime) -> date:
    """Booking date: calendar day of now, time of day truncated."""
    return now.date()
