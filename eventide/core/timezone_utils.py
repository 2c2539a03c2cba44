"""Current-time helpers for eventide."""

from __future__ import annotations

import datetime
import logging
import os

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


def now_utc() -> datetime.datetime:
    """Return current UTC time with tzinfo.

    Can be overridden for testing via the EVENTIDE_TEST_TIME environment variable.
    Format: ISO 8601 datetime string (e.g., "2024-03-01T09:00:00Z"); naive
    values are read as UTC.
    """
    test_time = os.environ.get("EVENTIDE_TEST_TIME")
    if test_time:
        try:
            dt = date_parser.isoparse(test_time)
        except ValueError as e:
            logger.warning("Failed to parse EVENTIDE_TEST_TIME=%r: %s", test_time, e)
        else:
            if dt.tzinfo is not None:
                return dt.astimezone(datetime.UTC)
            return dt.replace(tzinfo=datetime.UTC)

    return datetime.datetime.now(datetime.UTC)
