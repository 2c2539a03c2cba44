"""Data models for calendar events and their recurrence rules."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecurrenceFrequency(str, Enum):
    """Supported recurrence frequencies."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


KNOWN_FREQUENCIES = frozenset(f.value for f in RecurrenceFrequency)

Weekday = Annotated[int, Field(ge=0, le=6)]


class RecurrenceRule(BaseModel):
    """Recurrence rule attached to a base event.

    ``frequency`` is kept as a plain string so that an unknown value coming from
    persisted data survives loading and is reported by the expander as a
    malformed rule for that one event.
    """

    frequency: str = Field(default=RecurrenceFrequency.NONE.value, description="Recurrence frequency")
    interval: Optional[int] = Field(default=None, description="Every N days/weeks/months")
    days_of_week: Optional[list[Weekday]] = Field(
        default=None, alias="daysOfWeek", description="Weekdays for weekly rules, 0 = Sunday"
    )
    day_of_month: Optional[int] = Field(
        default=None, alias="dayOfMonth", description="Day of month for monthly rules"
    )
    end_date: Optional[str] = Field(
        default=None, alias="endDate", description="Inclusive last day of the recurrence"
    )

    model_config = ConfigDict(populate_by_name=True)

    @property
    def effective_interval(self) -> int:
        """Interval with the absent-means-one default applied."""
        return 1 if self.interval is None else self.interval

    @property
    def is_recurring(self) -> bool:
        return self.frequency != RecurrenceFrequency.NONE.value


class CalendarEvent(BaseModel):
    """A stored base event, or an occurrence derived from one.

    ``start`` and ``end`` hold wire-format timestamps
    (``2024-03-01T09:00:00.000Z``). They are parsed by the expansion engine,
    not at construction time.
    """

    id: str = Field(..., description="Event ID")
    title: str = Field(..., description="Event title")
    description: Optional[str] = Field(default=None, description="Optional description")
    color: str = Field(default="blue", description="Display color key or hex value")

    start: str = Field(..., description="Start timestamp of the first occurrence")
    end: str = Field(..., description="End timestamp of the first occurrence")
    all_day: bool = Field(default=False, alias="allDay", description="All-day event flag")

    recurrence: RecurrenceRule = Field(
        default_factory=RecurrenceRule, description="Recurrence rule"
    )

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence.is_recurring

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, as persisted and handed to the UI."""
        return self.model_dump(by_alias=True, exclude_none=True)
