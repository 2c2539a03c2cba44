"""Occurrence identifiers derived from base event ids.

An occurrence id is ``<baseId>-occurrence-<yyyyMMddHHmmss>``, the timestamp
being the occurrence start in its own offset. Every consumer that receives an
id from the UI (edit, delete, lookup) must go through ``resolve_base_id`` so
that mutations always target the stored base event.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import NamedTuple, Optional

from .datetime_utils import COMPACT_TIMESTAMP_FORMAT, compact_timestamp

logger = logging.getLogger(__name__)

OCCURRENCE_DELIMITER = "-occurrence-"


class OccurrenceKey(NamedTuple):
    """Structured form of an id: base id plus occurrence start, if any."""

    base_id: str
    occurrence_start: Optional[datetime]


def make_occurrence_id(base_id: str, occurrence_start: datetime) -> str:
    return f"{base_id}{OCCURRENCE_DELIMITER}{compact_timestamp(occurrence_start)}"


def is_occurrence_id(any_id: str) -> bool:
    return OCCURRENCE_DELIMITER in any_id


def resolve_base_id(any_id: str) -> str:
    """Return the base event id for an occurrence id, or the id itself.

    Splits on the first delimiter occurrence.

    Examples:
        >>> resolve_base_id("abc-occurrence-20240301090000")
        'abc'
        >>> resolve_base_id("abc")
        'abc'
    """
    base_id, _, _ = any_id.partition(OCCURRENCE_DELIMITER)
    return base_id


def split_occurrence_id(any_id: str) -> OccurrenceKey:
    """Split an id into its base id and naive occurrence start.

    The compact timestamp carries no offset, so the returned start is naive
    wall time. A suffix that does not parse yields ``None``.
    """
    base_id, sep, suffix = any_id.partition(OCCURRENCE_DELIMITER)
    if not sep:
        return OccurrenceKey(base_id, None)
    try:
        return OccurrenceKey(base_id, datetime.strptime(suffix, COMPACT_TIMESTAMP_FORMAT))
    except ValueError:
        logger.debug("Occurrence id %r has an unparseable timestamp suffix", any_id)
        return OccurrenceKey(base_id, None)
