"""Display ordering for a mix of base events and expanded occurrences."""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable
from datetime import datetime, timedelta

from eventide.exceptions import InvalidEventData

from .datetime_utils import parse_timestamp
from .models import CalendarEvent

logger = logging.getLogger(__name__)


def title_collation_key(title: str) -> tuple[str, str, str]:
    """Locale-independent title key: base letters, then accents and case.

    Accented letters sort next to their base letter ("é" between "e" and "f"),
    and the raw title breaks the remaining ties.
    """
    folded = title.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base, folded, title


def event_sort_key(event: CalendarEvent) -> tuple[datetime, timedelta, tuple[str, str, str]]:
    """Ordering key: start instant, then duration (shorter first), then title.

    Titles use ``title_collation_key``, so the order never depends on input
    order or on the process locale.

    Raises:
        InvalidEventData: If the event's start/end cannot be parsed
    """
    try:
        start = parse_timestamp(event.start)
        end = parse_timestamp(event.end)
    except ValueError as exc:
        raise InvalidEventData(event.id, str(exc)) from exc
    return start, end - start, title_collation_key(event.title or "")


def sort_events(events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """Return a new list of ``events`` in display order.

    The input is not modified. The sort is stable, so applying it to its own
    output is a no-op.
    """
    ordered = sorted(events, key=event_sort_key)
    logger.debug("Sorted %d events", len(ordered))
    return ordered
