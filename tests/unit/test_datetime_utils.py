"""Unit tests for eventide.calendar.datetime_utils and eventide.core.timezone_utils."""

from datetime import date, datetime, timedelta, timezone

import pytest

from eventide.calendar.datetime_utils import (
    day_bounds,
    end_of_day,
    event_duration_minutes,
    format_timestamp,
    month_view_window,
    parse_timestamp,
    sunday_based_weekday,
)
from eventide.core.timezone_utils import now_utc

pytestmark = pytest.mark.unit

UTC = timezone.utc


class TestParseTimestamp:
    def test_zulu(self):
        assert parse_timestamp("2024-03-01T09:00:00.000Z") == datetime(2024, 3, 1, 9, tzinfo=UTC)

    def test_offset_is_kept(self):
        parsed = parse_timestamp("2024-03-01T09:00:00+05:30")
        assert parsed.utcoffset() == timedelta(hours=5, minutes=30)
        assert parsed.hour == 9

    def test_naive_is_read_as_utc(self):
        assert parse_timestamp("2024-03-01T09:00:00") == datetime(2024, 3, 1, 9, tzinfo=UTC)

    def test_date_only(self):
        assert parse_timestamp("2024-03-10") == datetime(2024, 3, 10, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024-13-01T00:00:00Z", None])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)


class TestFormatTimestamp:
    def test_utc_uses_z_and_milliseconds(self):
        dt = datetime(2024, 3, 1, 9, 0, 0, 250000, tzinfo=UTC)
        assert format_timestamp(dt) == "2024-03-01T09:00:00.250Z"

    def test_other_offsets_are_explicit(self):
        dt = datetime(2024, 3, 1, 9, tzinfo=timezone(timedelta(hours=-5)))
        assert format_timestamp(dt) == "2024-03-01T09:00:00.000-05:00"

    def test_round_trip_through_parse(self):
        text = "2024-03-01T23:59:59.999Z"
        assert format_timestamp(parse_timestamp(text)) == text


class TestDayHelpers:
    def test_end_of_day(self):
        dt = datetime(2024, 3, 1, 9, tzinfo=UTC)
        assert format_timestamp(end_of_day(dt)) == "2024-03-01T23:59:59.999Z"

    def test_day_bounds(self):
        start, end = day_bounds(date(2024, 3, 1), date(2024, 3, 2))
        assert start == datetime(2024, 3, 1, tzinfo=UTC)
        assert end == datetime(2024, 3, 2, 23, 59, 59, 999000, tzinfo=UTC)

    @pytest.mark.parametrize(
        "day,expected", [(date(2024, 3, 3), 0), (date(2024, 3, 4), 1), (date(2024, 3, 9), 6)]
    )
    def test_sunday_based_weekday(self, day, expected):
        assert sunday_based_weekday(day) == expected


class TestMonthViewWindow:
    def test_sunday_start(self):
        assert month_view_window(date(2024, 3, 15)) == (date(2024, 2, 25), date(2024, 4, 6))

    def test_monday_start(self):
        assert month_view_window(date(2024, 3, 15), week_starts_on=1) == (
            date(2024, 2, 26),
            date(2024, 3, 31),
        )

    def test_month_already_aligned(self):
        # September 2024 starts on a Sunday and ends on a Monday.
        assert month_view_window(datetime(2024, 9, 30, 12, tzinfo=UTC)) == (
            date(2024, 9, 1),
            date(2024, 10, 5),
        )

    def test_invalid_week_start(self):
        with pytest.raises(ValueError):
            month_view_window(date(2024, 3, 1), week_starts_on=7)


class TestEventDurationMinutes:
    def test_rounded_minutes(self):
        assert event_duration_minutes("2024-03-01T09:00:00Z", "2024-03-01T10:30:20Z") == 90

    def test_invalid_input_is_zero(self):
        assert event_duration_minutes("nope", "2024-03-01T10:30:00Z") == 0


class TestNowUtc:
    def test_override_from_environment(self, monkeypatch):
        monkeypatch.setenv("EVENTIDE_TEST_TIME", "2024-03-01T14:00:00+02:00")
        assert now_utc() == datetime(2024, 3, 1, 12, tzinfo=UTC)

    def test_invalid_override_falls_back_to_clock(self, monkeypatch):
        monkeypatch.setenv("EVENTIDE_TEST_TIME", "not-a-time")
        assert now_utc().tzinfo is not None

    def test_without_override_is_aware(self):
        assert now_utc().utcoffset() == timedelta(0)
