"""Reminder ticks: lead windows, exactly-once sends, completion and failure handling."""
from datetime import datetime, timezone

import pytest

from slotbook.core.constants import PATTERN_EMAIL, PATTERN_PUSH, PATTERN_SMS
from slotbook.services.notifications.types import SendResult
from slotbook.services.reservation_service import ReservationService


def at(hh, mm, ss=0, day=1):
    return datetime(2025, 3, day, hh, mm, ss, tzinfo=timezone.utc)


ALL_CHANNELS = dict(
    email="a@example.com",
    phone="+15550001111",
    pushNotificationKey="device-token",
    receiveEmail=True,
    receiveSmsNotification=True,
    receivePushNotification=True,
)


@pytest.fixture
def booked(book, gateway):
    r = book("13:15", **ALL_CHANNELS)
    gateway.reset()
    return r


class TestFullDay:
    def test_each_channel_once_then_complete(self, dispatcher, gateway, repo, booked):
        dispatcher.run_tick(at(13, 0))
        assert gateway.sent == []

        dispatcher.run_tick(at(13, 5))
        assert gateway.keys() == [PATTERN_EMAIL]
        email = gateway.sent[0][1]
        assert email.to == "a@example.com"
        assert email.subject == "Upcoming Call Reservation Reminder"
        assert repo.find_by_id(booked.id).email_sent

        dispatcher.run_tick(at(13, 10))
        assert gateway.keys() == [PATTERN_EMAIL, PATTERN_SMS]
        sms = gateway.sent[1][1]
        assert sms.to == "+15550001111"
        assert sms.text == "Reminder: Your call is scheduled in 5 minutes at 13:15. Be ready! - Call Support Team"

        dispatcher.run_tick(at(13, 14))
        assert gateway.keys() == [PATTERN_EMAIL, PATTERN_SMS, PATTERN_PUSH]
        push = gateway.sent[2][1]
        assert push.to == "device-token"
        assert push.text == "Your call starts in 1 minute at 13:15!"

        summary = dispatcher.run_tick(at(13, 16))
        assert summary.completed == 1
        assert repo.find_by_id(booked.id).status == "successful"
        assert len(gateway.sent) == 3

        assert dispatcher.run_tick(at(13, 17)).scanned == 0

    def test_no_resend_within_window(self, dispatcher, gateway, booked):
        dispatcher.run_tick(at(13, 5, 0))
        dispatcher.run_tick(at(13, 5, 30))
        dispatcher.run_tick(at(13, 5, 59))
        assert gateway.keys() == [PATTERN_EMAIL]

    def test_window_is_half_open(self, dispatcher, gateway, booked):
        dispatcher.run_tick(at(13, 4, 59))
        dispatcher.run_tick(at(13, 6, 0))
        assert gateway.sent == []


class TestOptInAndHorizon:
    def test_opted_out_channels_are_skipped(self, dispatcher, gateway, book):
        book("13:15", email="a@example.com", receiveEmail=False, receiveSmsNotification=True, phone="+1555")
        gateway.reset()
        dispatcher.run_tick(at(13, 5))
        dispatcher.run_tick(at(13, 10))
        assert gateway.keys() == [PATTERN_SMS]

    def test_beyond_lookahead_not_scanned(self, dispatcher, book):
        book("15:00", **ALL_CHANNELS)
        assert dispatcher.run_tick(at(13, 5)).scanned == 0

    def test_missed_slot_completed_next_day(self, dispatcher, repo, gateway, booked):
        summary = dispatcher.run_tick(at(9, 0, day=2))
        assert summary.completed == 1
        assert repo.find_by_id(booked.id).status == "successful"
        assert gateway.sent == []

    def test_cancelled_reservations_ignored(self, dispatcher, service, gateway, booked):
        service.cancel(booked.id)
        gateway.reset()
        summary = dispatcher.run_tick(at(13, 5))
        assert summary.scanned == 0
        assert gateway.sent == []


class TestFailures:
    def test_failed_send_retried_while_window_open(self, dispatcher, gateway, repo, booked):
        gateway.succeed = False
        dispatcher.run_tick(at(13, 5, 0))
        assert not repo.find_by_id(booked.id).email_sent
        assert dispatcher.in_flight() == set()

        gateway.succeed = True
        dispatcher.run_tick(at(13, 5, 30))
        assert gateway.keys() == [PATTERN_EMAIL, PATTERN_EMAIL]
        assert repo.find_by_id(booked.id).email_sent

    def test_failed_send_not_retried_after_window(self, dispatcher, gateway, repo, booked):
        gateway.succeed = False
        dispatcher.run_tick(at(13, 5))
        dispatcher.run_tick(at(13, 6))
        assert gateway.keys() == [PATTERN_EMAIL]
        assert not repo.find_by_id(booked.id).email_sent

    def test_in_flight_send_not_duplicated(self, dispatcher, gateway, repo, booked):
        gateway.hold = True
        dispatcher.run_tick(at(13, 5, 0))
        assert dispatcher.in_flight() == {(booked.id, "email")}

        summary = dispatcher.run_tick(at(13, 5, 30))
        assert summary.dispatched == 0
        assert len(gateway.sent) == 1

        gateway.pending[0].set_result(SendResult(success=True, message="ok"))
        assert dispatcher.in_flight() == set()
        assert repo.find_by_id(booked.id).email_sent

    def test_queue_failure_counted_and_released(self, dispatcher, gateway, booked):
        gateway.fail_for.add("a@example.com")
        summary = dispatcher.run_tick(at(13, 5))
        assert summary.errors == 1
        assert summary.dispatched == 0
        assert dispatcher.in_flight() == set()

    def test_one_bad_reservation_does_not_stop_the_tick(self, dispatcher, gateway, repo, book, monkeypatch):
        past = book("11:00")
        due = book("13:15", email="b@example.com", receiveEmail=True)
        gateway.reset()

        def boom(self, reservation_id):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(ReservationService, "complete", boom)
        summary = dispatcher.run_tick(at(13, 5))
        assert summary.errors == 1
        assert summary.dispatched == 1
        assert repo.find_by_id(past.id).status == "queued"
        assert repo.find_by_id(due.id).email_sent
