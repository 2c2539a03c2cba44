"""Timestamp parsing, formatting and calendar-day helpers.

Wire format for every timestamp handled by eventide is ISO-8601 with
milliseconds and an explicit offset, e.g. ``2024-03-01T09:00:00.000Z``.
Parsing is delegated to ``dateutil.parser.isoparse`` so any ISO-8601 variant
is accepted on input; output is always the canonical form.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from typing import Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

COMPACT_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def ensure_timezone_aware(dt: datetime) -> datetime:
    """Return ``dt`` unchanged if aware, otherwise the same wall time in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def parse_timestamp(value: str) -> datetime:
    """Parse a wire-format timestamp into an aware datetime.

    The offset written in the string is kept as-is (no conversion to UTC), so
    calendar-day arithmetic happens in the offset the event was written in.
    Timestamps without an offset are read as UTC.

    Raises:
        ValueError: If ``value`` is not a string or not valid ISO-8601
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Timestamp must be a non-empty string, got {value!r}")
    try:
        parsed = isoparse(value.strip())
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Invalid ISO-8601 timestamp {value!r}: {exc}") from exc
    return ensure_timezone_aware(parsed)


def format_timestamp(dt: datetime) -> str:
    """Render an aware datetime in wire format.

    Examples:
        >>> format_timestamp(datetime(2024, 3, 1, 9, 0, tzinfo=UTC))
        '2024-03-01T09:00:00.000Z'
    """
    text = ensure_timezone_aware(dt).isoformat(timespec="milliseconds")
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def compact_timestamp(dt: datetime) -> str:
    """Render ``dt`` as ``yyyyMMddHHmmss`` in its own offset."""
    return dt.strftime(COMPACT_TIMESTAMP_FORMAT)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    """Last representable millisecond of the day, matching the wire precision."""
    return dt.replace(hour=23, minute=59, second=59, microsecond=999000)


def sunday_based_weekday(day: Union[date, datetime]) -> int:
    """Weekday index with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def month_view_window(day: Union[date, datetime], week_starts_on: int = 0) -> tuple[date, date]:
    """First and last visible day of the month grid containing ``day``.

    The grid starts on the week (beginning ``week_starts_on``, 0 = Sunday)
    containing the 1st and ends on the week containing the month's last day.

    Args:
        day: Any day inside the month to display
        week_starts_on: First weekday of a grid row, 0 = Sunday

    Returns:
        (first_visible_day, last_visible_day), both inclusive
    """
    if not 0 <= week_starts_on <= 6:
        raise ValueError(f"week_starts_on must be 0..6, got {week_starts_on}")

    if isinstance(day, datetime):
        day = day.date()
    first_of_month = day.replace(day=1)
    last_of_month = first_of_month + relativedelta(day=31)

    lead = (sunday_based_weekday(first_of_month) - week_starts_on) % 7
    trail = 6 - (sunday_based_weekday(last_of_month) - week_starts_on) % 7
    return first_of_month - timedelta(days=lead), last_of_month + timedelta(days=trail)


def day_bounds(first: date, last: date, tzinfo: Optional[object] = None) -> tuple[datetime, datetime]:
    """Turn an inclusive day range into instants: 00:00:00.000 .. 23:59:59.999."""
    tz = tzinfo or UTC
    start = datetime(first.year, first.month, first.day, tzinfo=tz)  # type: ignore[arg-type]
    end = datetime(last.year, last.month, last.day, tzinfo=tz)  # type: ignore[arg-type]
    return start, end_of_day(end)


def event_duration_minutes(start: str, end: str) -> int:
    """Rounded duration in minutes between two wire timestamps; 0 if either is invalid."""
    try:
        start_dt = parse_timestamp(start)
        end_dt = parse_timestamp(end)
    except ValueError:
        logger.debug("Cannot compute duration for start=%r end=%r", start, end)
        return 0
    return round((end_dt - start_dt).total_seconds() / 60)
