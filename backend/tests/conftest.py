"""Shared fixtures: in-memory SQLite store, recording gateway, fixed clock."""
import os

# Must be set before slotbook.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFY_TRANSPORT", "log")
os.environ.setdefault("TIMEZONE", "UTC")

from concurrent.futures import Future
from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from slotbook.db.base import Base
from slotbook.models.reservation import Reservation  # noqa: F401
from slotbook.services.notifications.types import SendResult
from slotbook.services.reminder_dispatcher import ReminderDispatcher
from slotbook.services.reservation_service import CreateReservationRequest, ReservationService
from slotbook.services.store import ReservationRepository

UTC = timezone.utc
# Booking "today" for every test unless a test sets its own clock
NOON = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class FakeGateway:
    """Records every send. Futures complete immediately unless hold=True."""

    def __init__(self, succeed: bool = True, hold: bool = False):
        self.succeed = succeed
        self.hold = hold
        self.sent: list[tuple[str, object]] = []
        self.pending: list[Future] = []
        self.fail_for: set[str] = set()

    def send(self, pattern_key, message):
        if getattr(message, "to", None) in self.fail_for:
            raise ValueError(f"cannot queue for {message.to}")
        self.sent.append((pattern_key, message))
        future: Future = Future()
        if self.hold:
            self.pending.append(future)
        else:
            future.set_result(SendResult(success=self.succeed, message="ok" if self.succeed else "failed"))
        return future

    def keys(self) -> list[str]:
        return [key for key, _ in self.sent]

    def reset(self) -> None:
        self.sent.clear()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def repo(db):
    return ReservationRepository(db, UTC)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def clock():
    """Mutable clock: tests move time with clock.now = ..."""

    class Clock:
        now = NOON

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def service(repo, gateway, clock):
    return ReservationService(repo, gateway, UTC, clock=clock)


@pytest.fixture
def dispatcher(repo, gateway):
    @contextmanager
    def scope():
        yield repo

    return ReminderDispatcher(scope, gateway, UTC)


@pytest.fixture
def book(service):
    """Create a reservation and return its record; fails the test on error."""

    def _book(start_time="13:15", **kwargs):
        result = service.create(CreateReservationRequest(startTime=start_time, **kwargs))
        assert result.ok, result.message
        return result.record

    return _book


@pytest.fixture
def client(service):
    from slotbook.deps import get_reservation_service
    from slotbook.main import app

    app.dependency_overrides[get_reservation_service] = lambda: service
    # No context manager: lifespan (scheduler) is not started
    yield TestClient(app)
    app.dependency_overrides.clear()
