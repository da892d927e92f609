"""Runs every 1 min: complete past reservations and send due email/SMS/push reminders."""
import logging
import threading
from datetime import datetime

from slotbook.core.slot_clock import now_in
from slotbook.deps import get_dispatcher, get_timezone
from slotbook.services.reminder_dispatcher import ReminderDispatcher, TickSummary

logger = logging.getLogger(__name__)

# Single-flight: a tick that finds the previous one still running is skipped
_lock = threading.Lock()


def run_reminder_dispatch_job(
    now: datetime | None = None,
    dispatcher: ReminderDispatcher | None = None,
) -> TickSummary | None:
    if not _lock.acquire(blocking=False):
        logger.warning("Reminder job: previous tick still running; skipping this tick")
        return None
    try:
        dispatcher = dispatcher or get_dispatcher()
        return dispatcher.run_tick(now or now_in(get_timezone()))
    except Exception as e:
        logger.exception("Reminder job failed: %s", e)
        return None
    finally:
        _lock.release()
