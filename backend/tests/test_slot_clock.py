"""Slot parsing, end-time arithmetic and lead windows."""
from datetime import date, datetime, time, timezone

import pytest

from slotbook.core.errors import InvalidFormat, InvalidMinuteAlignment
from slotbook.core.slot_clock import (
    combine,
    format_slot,
    is_within_lead_window,
    parse_slot_start,
    resolve_timezone,
    slot_end,
    today,
)

UTC = timezone.utc


class TestParseSlotStart:
    @pytest.mark.parametrize("value,expected", [
        ("00:00", time(0, 0)),
        ("09:15", time(9, 15)),
        ("13:30", time(13, 30)),
        ("23:45", time(23, 45)),
    ])
    def test_quarter_hours_parse(self, value, expected):
        assert parse_slot_start(value) == expected

    @pytest.mark.parametrize("value", ["10:10", "10:01", "10:59"])
    def test_off_quarter_minutes_rejected(self, value):
        with pytest.raises(InvalidMinuteAlignment) as exc:
            parse_slot_start(value)
        assert exc.value.message == "Minutes must be 00, 15, 30, or 45"

    @pytest.mark.parametrize("value", ["", "9:15", "0915", "24:00", "12:60", "ab:cd", "12:15:00"])
    def test_malformed_rejected(self, value):
        with pytest.raises(InvalidFormat):
            parse_slot_start(value)

    def test_alignment_error_is_a_format_error(self):
        with pytest.raises(InvalidFormat):
            parse_slot_start("10:20")


class TestSlotEnd:
    def test_adds_fifteen_minutes(self):
        assert format_slot(slot_end(time(10, 0))) == "10:15"
        assert format_slot(slot_end(time(10, 45))) == "11:00"

    def test_last_slot_wraps_to_midnight(self):
        assert format_slot(slot_end(time(23, 45))) == "00:00"


class TestLeadWindow:
    target = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)

    def test_window_opens_at_lead(self):
        assert is_within_lead_window(self.target, datetime(2025, 3, 1, 9, 50, 0, tzinfo=UTC), 10)

    def test_inside_window(self):
        assert is_within_lead_window(self.target, datetime(2025, 3, 1, 9, 50, 59, tzinfo=UTC), 10)

    def test_one_second_early(self):
        assert not is_within_lead_window(self.target, datetime(2025, 3, 1, 9, 49, 59, tzinfo=UTC), 10)

    def test_window_closed_after_one_minute(self):
        assert not is_within_lead_window(self.target, datetime(2025, 3, 1, 9, 51, 0, tzinfo=UTC), 10)

    def test_push_lead(self):
        assert is_within_lead_window(self.target, datetime(2025, 3, 1, 9, 59, 0, tzinfo=UTC), 1)
        assert not is_within_lead_window(self.target, datetime(2025, 3, 1, 10, 0, 0, tzinfo=UTC), 1)


class TestTimezone:
    def test_combine_uses_zone(self):
        tz = resolve_timezone("Europe/Istanbul")
        at = combine(date(2025, 3, 1), time(13, 15), tz)
        assert at.utcoffset().total_seconds() == 3 * 3600

    def test_unknown_zone(self):
        with pytest.raises(ValueError):
            resolve_timezone("Mars/Olympus")

    def test_today_truncates(self):
        assert today(datetime(2025, 3, 1, 23, 59, tzinfo=UTC)) == date(2025, 3, 1)
