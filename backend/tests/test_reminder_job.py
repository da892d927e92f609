"""Scheduler entrypoint: single-flight guard and error containment."""
from datetime import datetime, timezone

from slotbook.scheduler import reminder_job
from slotbook.scheduler.reminder_job import run_reminder_dispatch_job
from slotbook.services.reminder_dispatcher import TickSummary

NOW = datetime(2025, 3, 1, 13, 5, tzinfo=timezone.utc)


class RecordingDispatcher:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def run_tick(self, now):
        self.calls.append(now)
        if self.fail:
            raise RuntimeError("database is down")
        return TickSummary(scanned=1)


class TestReminderJob:
    def test_runs_tick(self):
        d = RecordingDispatcher()
        summary = run_reminder_dispatch_job(now=NOW, dispatcher=d)
        assert summary == TickSummary(scanned=1)
        assert d.calls == [NOW]

    def test_skips_while_previous_tick_running(self):
        d = RecordingDispatcher()
        assert reminder_job._lock.acquire(blocking=False)
        try:
            assert run_reminder_dispatch_job(now=NOW, dispatcher=d) is None
        finally:
            reminder_job._lock.release()
        assert d.calls == []
        # Guard released: next tick runs
        assert run_reminder_dispatch_job(now=NOW, dispatcher=d) is not None

    def test_tick_failure_is_contained(self):
        d = RecordingDispatcher(fail=True)
        assert run_reminder_dispatch_job(now=NOW, dispatcher=d) is None
        assert not reminder_job._lock.locked()

    def test_real_dispatcher_end_to_end(self, dispatcher, book, gateway):
        book("13:15", email="a@example.com", receiveEmail=True)
        gateway.reset()
        summary = run_reminder_dispatch_job(now=NOW, dispatcher=dispatcher)
        assert summary.dispatched == 1
