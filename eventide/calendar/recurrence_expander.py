"""Recurrence expansion for eventide base events.

Turns one stored base event plus a viewing window into the concrete
occurrences overlapping that window. Candidate dates come from
``dateutil.rrule``; the rule is built so that its interval arithmetic is
always relative to the base event's own start date:

- daily:   every ``interval`` days from the base date
- weekly:  weeks start on the base event's weekday (``wkst``), every
           ``interval`` weeks, on the listed weekdays
- monthly: every ``interval`` months from the base month, on ``dayOfMonth``;
           months without that day are skipped, never clamped

Generation is bounded by the rule's end date and by an iteration ceiling
measured in calendar days from the base start date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, rrule, weekdays

from eventide.exceptions import InvalidEventData, MalformedRecurrenceRule

from .datetime_utils import (
    end_of_day,
    ensure_timezone_aware,
    format_timestamp,
    parse_timestamp,
    start_of_day,
)
from .models import KNOWN_FREQUENCIES, CalendarEvent, RecurrenceFrequency
from .occurrence_ids import make_occurrence_id

logger = logging.getLogger(__name__)

DEFAULT_ITERATION_CEILING_DAYS = 365 * 3

_ALL_DAY_END_PRECISION = timedelta(milliseconds=1)


@dataclass
class RecurrenceExpanderConfig:
    """Configuration for recurrence expansion."""

    iteration_ceiling_days: int = DEFAULT_ITERATION_CEILING_DAYS

    @classmethod
    def from_settings(cls, settings: Any) -> RecurrenceExpanderConfig:
        """Extract expansion settings from a config object, dict or None."""
        if settings is None:
            return cls()
        if isinstance(settings, dict):
            ceiling = settings.get("iteration_ceiling_days", DEFAULT_ITERATION_CEILING_DAYS)
        else:
            ceiling = getattr(settings, "iteration_ceiling_days", DEFAULT_ITERATION_CEILING_DAYS)
        return cls(iteration_ceiling_days=int(ceiling))


def overlaps_window(
    start: datetime, end: datetime, window_start: datetime, window_end: datetime
) -> bool:
    """Three-way overlap test: starts inside, ends inside, or spans the window."""
    return (
        window_start <= start <= window_end
        or window_start <= end <= window_end
        or (start < window_start and end > window_end)
    )


def to_rrule_weekday(day: int) -> Any:
    """Map a 0 = Sunday weekday index to the dateutil weekday constant."""
    return weekdays[(day - 1) % 7]


class RecurrenceExpander:
    """Materializes occurrences of base events inside a viewing window."""

    def __init__(self, settings: Any = None):
        """Initialize expander.

        Args:
            settings: Optional object or dict carrying ``iteration_ceiling_days``
        """
        config = RecurrenceExpanderConfig.from_settings(settings)
        if config.iteration_ceiling_days < 1:
            raise ValueError(
                f"iteration_ceiling_days must be >= 1, got {config.iteration_ceiling_days}"
            )
        self.iteration_ceiling_days = config.iteration_ceiling_days

    def expand(
        self,
        base_event: CalendarEvent,
        window_start: datetime,
        window_end: datetime,
    ) -> list[CalendarEvent]:
        """Return the occurrences of ``base_event`` overlapping the window, in start order.

        Args:
            base_event: Stored base event
            window_start: Inclusive window start (naive values are read as UTC)
            window_end: Inclusive window end (naive values are read as UTC)

        Returns:
            The base event itself for non-recurring events that overlap the
            window, otherwise the synthesized occurrences. Malformed rules
            yield an empty list.

        Raises:
            InvalidEventData: If the base start/end cannot be parsed, end < start,
                or a timed event ends when it starts
            ValueError: If window_start is after window_end
        """
        window_start = ensure_timezone_aware(window_start)
        window_end = ensure_timezone_aware(window_end)
        if window_start > window_end:
            raise ValueError(f"Window start {window_start} is after window end {window_end}")

        base_start, base_end = self._parse_bounds(base_event)

        if not base_event.is_recurring:
            if overlaps_window(base_start, base_end, window_start, window_end):
                return [base_event]
            return []

        try:
            recurrence = self._build_rrule(base_event, base_start)
        except MalformedRecurrenceRule as exc:
            logger.warning("%s; treating event as never recurring", exc)
            return []

        duration = base_end - base_start
        occurrences: list[CalendarEvent] = []
        reached_window_end = False

        for candidate in recurrence:
            occ_start, occ_end = self._anchor(candidate, base_start, duration, base_event.all_day)
            if occ_start > window_end:
                reached_window_end = True
                break
            if overlaps_window(occ_start, occ_end, window_start, window_end):
                occurrences.append(self._make_occurrence(base_event, occ_start, occ_end))

        if not reached_window_end and self._ceiling_caps(base_event, base_start):
            logger.debug(
                "Iteration ceiling of %d days reached for event %s; %d occurrences in window",
                self.iteration_ceiling_days,
                base_event.id,
                len(occurrences),
            )

        logger.debug(
            "Expanded event %s (%s): %d occurrences in window",
            base_event.id,
            base_event.recurrence.frequency,
            len(occurrences),
        )
        return occurrences

    def _parse_bounds(self, base_event: CalendarEvent) -> tuple[datetime, datetime]:
        try:
            base_start = parse_timestamp(base_event.start)
            base_end = parse_timestamp(base_event.end)
        except ValueError as exc:
            raise InvalidEventData(base_event.id, str(exc)) from exc
        if base_end < base_start:
            raise InvalidEventData(
                base_event.id, f"end {base_event.end!r} precedes start {base_event.start!r}"
            )
        if base_end == base_start and not base_event.all_day:
            raise InvalidEventData(base_event.id, "timed event has zero duration")
        return base_start, base_end

    def _build_rrule(self, base_event: CalendarEvent, base_start: datetime) -> rrule:
        """Translate the event's recurrence rule into a bounded dateutil rrule.

        Raises:
            MalformedRecurrenceRule: If the rule cannot be evaluated
        """
        rule = base_event.recurrence
        frequency = rule.frequency
        if frequency not in KNOWN_FREQUENCIES:
            raise MalformedRecurrenceRule(base_event.id, f"unknown frequency {frequency!r}")

        interval = rule.effective_interval
        if interval < 1:
            raise MalformedRecurrenceRule(base_event.id, f"interval must be >= 1, got {interval}")

        common: dict[str, Any] = {
            "dtstart": base_start,
            "interval": interval,
            "until": self._until(base_event, base_start),
            "cache": False,
        }

        if frequency == RecurrenceFrequency.DAILY.value:
            return rrule(DAILY, **common)

        if frequency == RecurrenceFrequency.WEEKLY.value:
            days = sorted(set(rule.days_of_week or []))
            if not days:
                raise MalformedRecurrenceRule(base_event.id, "weekly rule has no daysOfWeek")
            return rrule(
                WEEKLY,
                byweekday=[to_rrule_weekday(d) for d in days],
                wkst=base_start.weekday(),
                **common,
            )

        day_of_month = rule.day_of_month
        if day_of_month is None or not 1 <= day_of_month <= 31:
            raise MalformedRecurrenceRule(
                base_event.id, f"monthly rule needs dayOfMonth in 1..31, got {day_of_month!r}"
            )
        return rrule(MONTHLY, bymonthday=day_of_month, **common)

    def _until(self, base_event: CalendarEvent, base_start: datetime) -> datetime:
        """Last candidate instant: end-date day or the iteration ceiling, whichever is first."""
        ceiling = base_start + timedelta(days=self.iteration_ceiling_days - 1)
        end_day = self._end_day_limit(base_event, base_start)
        if end_day is None:
            return ceiling
        return min(ceiling, end_day)

    def _end_day_limit(self, base_event: CalendarEvent, base_start: datetime) -> Optional[datetime]:
        """The base time-of-day on the rule's end date, so that whole day stays included."""
        end_date = base_event.recurrence.end_date
        if not end_date:
            return None
        try:
            end_dt = parse_timestamp(end_date)
        except ValueError as exc:
            raise MalformedRecurrenceRule(base_event.id, f"unparseable endDate: {exc}") from exc
        return base_start.replace(year=end_dt.year, month=end_dt.month, day=end_dt.day)

    def _ceiling_caps(self, base_event: CalendarEvent, base_start: datetime) -> bool:
        ceiling = base_start + timedelta(days=self.iteration_ceiling_days - 1)
        try:
            end_day = self._end_day_limit(base_event, base_start)
        except MalformedRecurrenceRule:
            return False
        return end_day is None or ceiling < end_day

    @staticmethod
    def _anchor(
        candidate: datetime, base_start: datetime, duration: timedelta, all_day: bool
    ) -> tuple[datetime, datetime]:
        """Re-anchor the base time-of-day and duration onto the candidate's date.

        dateutil drops sub-second precision from dtstart, so the base start is
        re-applied on the candidate date rather than using the candidate as-is.
        """
        occ_start = base_start.replace(
            year=candidate.year, month=candidate.month, day=candidate.day
        )
        if not all_day:
            return occ_start, occ_start + duration

        day_start = start_of_day(occ_start)
        span = max(duration - _ALL_DAY_END_PRECISION, timedelta(0))
        return day_start, end_of_day(day_start + span)

    @staticmethod
    def _make_occurrence(
        base_event: CalendarEvent, occ_start: datetime, occ_end: datetime
    ) -> CalendarEvent:
        return base_event.model_copy(
            deep=True,
            update={
                "id": make_occurrence_id(base_event.id, occ_start),
                "start": format_timestamp(occ_start),
                "end": format_timestamp(occ_end),
            },
        )


def expand(
    base_event: CalendarEvent,
    window_start: datetime,
    window_end: datetime,
    settings: Any = None,
) -> list[CalendarEvent]:
    """Convenience wrapper around ``RecurrenceExpander(settings).expand``."""
    return RecurrenceExpander(settings).expand(base_event, window_start, window_end)
