"""Tests for the civil clock."""

from datetime import date, datetime, time, timedelta, timezone

from lotledger.timezone import civil_stamp, civil_timezone, format_date, format_time


class TestCivilStamp:
    def test_utc_converted_to_fixed_offset(self):
        now = datetime(2024, 5, 3, 2, 30, 45, tzinfo=timezone.utc)
        assert civil_stamp(now) == (date(2024, 5, 2), time(23, 30))

    def test_naive_taken_as_local(self):
        now = datetime(2024, 5, 3, 2, 30, 45)
        assert civil_stamp(now) == (date(2024, 5, 3), time(2, 30))

    def test_custom_offset(self):
        now = datetime(2024, 5, 3, 2, 30, tzinfo=timezone.utc)
        assert civil_stamp(now, offset_hours=2) == (date(2024, 5, 3), time(4, 30))

    def test_no_daylight_saving(self):
        january = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        july = datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc)
        assert civil_stamp(january)[1] == civil_stamp(july)[1] == time(9, 0)

    def test_defaults_to_now(self):
        event_date, event_time = civil_stamp()
        assert event_time.second == 0
        assert isinstance(event_date, date)

    def test_timezone_offset(self):
        assert civil_timezone().utcoffset(None) == timedelta(hours=-3)


class TestFormatting:
    def test_formats(self):
        assert format_date(date(2024, 5, 3)) == "2024-05-03"
        assert format_time(time(9, 5)) == "09:05"
