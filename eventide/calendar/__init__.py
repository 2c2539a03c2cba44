"""Calendar core: models, recurrence expansion, ordering and occurrence ids."""

from .event_sorter import sort_events
from .models import CalendarEvent, RecurrenceFrequency, RecurrenceRule
from .occurrence_ids import make_occurrence_id, resolve_base_id
from .recurrence_expander import RecurrenceExpander, expand

__all__ = [
    "CalendarEvent",
    "RecurrenceExpander",
    "RecurrenceFrequency",
    "RecurrenceRule",
    "expand",
    "make_occurrence_id",
    "resolve_base_id",
    "sort_events",
]
