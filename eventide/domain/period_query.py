"""Period queries: expand every base event for a window and sort the result."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from eventide.calendar.datetime_utils import end_of_day, ensure_timezone_aware, start_of_day
from eventide.calendar.event_sorter import sort_events
from eventide.calendar.models import CalendarEvent
from eventide.calendar.recurrence_expander import RecurrenceExpander
from eventide.exceptions import EventideError

logger = logging.getLogger(__name__)


@dataclass
class EventFailure:
    """A base event that could not be displayed for this query."""

    event_id: str
    reason: str


@dataclass
class PeriodQueryResult:
    """Display-ordered events for a window plus the events that failed."""

    events: list[CalendarEvent] = field(default_factory=list)
    failures: list[EventFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def normalize_period(view_start: datetime, view_end: datetime) -> tuple[datetime, datetime]:
    """Widen a view range to whole days: start of the first, end of the last."""
    return (
        start_of_day(ensure_timezone_aware(view_start)),
        end_of_day(ensure_timezone_aware(view_end)),
    )


def get_events_for_period(
    events: Iterable[CalendarEvent],
    view_start: datetime,
    view_end: datetime,
    settings: Any = None,
) -> PeriodQueryResult:
    """Expand each base event over the day-normalized window and sort the union.

    One event failing (bad timestamps, unexpected errors) never prevents the
    others from being returned; the failure is logged and reported in
    ``PeriodQueryResult.failures``.

    Args:
        events: Snapshot of stored base events
        view_start: First visible day (any time on it)
        view_end: Last visible day (any time on it)
        settings: Optional expansion settings (``iteration_ceiling_days``)
    """
    window_start, window_end = normalize_period(view_start, view_end)
    expander = RecurrenceExpander(settings)
    result = PeriodQueryResult()

    collected: list[CalendarEvent] = []
    for event in events:
        try:
            collected.extend(expander.expand(event, window_start, window_end))
        except EventideError as exc:
            logger.warning("Unable to display event %s: %s", event.id, exc)
            result.failures.append(EventFailure(event_id=event.id, reason=str(exc)))
        except Exception as exc:
            logger.exception("Unexpected error expanding event %s", event.id)
            result.failures.append(EventFailure(event_id=event.id, reason=str(exc)))

    result.events = sort_events(collected)
    logger.debug(
        "Period %s..%s: %d events, %d failures",
        window_start.isoformat(),
        window_end.isoformat(),
        len(result.events),
        len(result.failures),
    )
    return result
