"""Custom exception hierarchy for the eventide calendar core.

Per-event failures are raised by the expansion engine and caught by the
period query, which logs them and keeps processing the remaining events.
"""

from __future__ import annotations


class EventideError(Exception):
    """Base exception for all eventide errors."""


class InvalidEventData(EventideError):
    """A base event's start/end timestamps could not be used.

    Raised when:
    - start or end fails to parse as an ISO-8601 timestamp
    - end precedes start, or equals it for a timed event

    The event contributes zero occurrences to the query.
    """

    def __init__(self, event_id: str, reason: str):
        self.event_id = event_id
        self.reason = reason
        super().__init__(f"Invalid event data for {event_id!r}: {reason}")


class MalformedRecurrenceRule(EventideError):
    """A recurrence rule cannot be evaluated.

    Raised when:
    - frequency is outside {none, daily, weekly, monthly}
    - interval is below 1
    - a weekly rule has no days of week
    - a monthly rule has no usable day of month
    - the end date does not parse

    Treated as "never recurs"; never fatal to a query.
    """

    def __init__(self, event_id: str, reason: str):
        self.event_id = event_id
        self.reason = reason
        super().__init__(f"Malformed recurrence rule for {event_id!r}: {reason}")


class EventStoreError(EventideError):
    """The persisted event store could not be read or written."""
