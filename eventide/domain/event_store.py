"""JSON-backed store of base calendar events with atomic writes.

The store is the only shared mutable state in eventide. Readers get a
snapshot (a list copy) and must not assume it stays current; every mutation
is written through to disk before it returns.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from eventide.calendar.models import CalendarEvent
from eventide.calendar.occurrence_ids import resolve_base_id
from eventide.exceptions import EventStoreError

from .period_query import PeriodQueryResult, get_events_for_period

logger = logging.getLogger(__name__)

DEFAULT_STORE_FILENAME = "events.json"


class EventStore:
    """Persistent list of base events.

    The on-disk format is a JSON array of events using the camelCase wire
    keys (``allDay``, ``daysOfWeek``, ...). Any id accepted by the mutating
    and lookup methods may be an occurrence id; it is resolved to its base id
    first.
    """

    def __init__(self, path: str | Path | None = None, settings: Any = None) -> None:
        """Create an EventStore and load existing data.

        Args:
            path: Path to the JSON file. Defaults to ``./events.json``.
            settings: Optional expansion settings used by period queries

        Raises:
            EventStoreError: If an existing file cannot be read or parsed
        """
        self._path = Path(path) if path else Path.cwd() / DEFAULT_STORE_FILENAME
        self._settings = settings
        self._lock = threading.Lock()
        self._events: list[CalendarEvent] = []
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        """(Re)load events from disk. Malformed records are logged and skipped."""
        with self._lock:
            if not self._path.exists():
                logger.debug("Event store file not found; starting empty: %s", self._path)
                self._events = []
                return

            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except (OSError, ValueError) as exc:
                raise EventStoreError(f"Failed to read event store {self._path}: {exc}") from exc
            if not isinstance(data, list):
                raise EventStoreError(f"Event store {self._path} must contain a JSON array")

            events: list[CalendarEvent] = []
            for i, record in enumerate(data):
                try:
                    events.append(CalendarEvent.model_validate(record))
                except ValidationError as exc:
                    logger.warning(
                        "Skipping malformed event record %d in %s: %s", i, self._path, exc
                    )

            self._events = events
            logger.debug("Loaded event store %s (%d events)", self._path, len(events))

    def snapshot(self) -> list[CalendarEvent]:
        """Copy of the current base events."""
        with self._lock:
            return list(self._events)

    def get_event_by_id(self, event_id: str) -> Optional[CalendarEvent]:
        base_id = resolve_base_id(event_id)
        with self._lock:
            return self._find_locked(base_id)

    def add_event(self, data: dict[str, Any]) -> CalendarEvent:
        """Validate ``data`` (wire keys, no id), assign a new id and persist.

        Raises:
            pydantic.ValidationError: If ``data`` is not a valid event
            EventStoreError: If the store cannot be written
        """
        payload = {k: v for k, v in data.items() if k != "id"}
        event = CalendarEvent.model_validate({**payload, "id": str(uuid.uuid4())})

        with self._lock:
            self._events.append(event)
            try:
                self._persist_locked()
            except EventStoreError:
                self._events.pop()
                raise

        logger.info("Added event %s (%r)", event.id, event.title)
        return event

    def update_event(self, event_id: str, updates: dict[str, Any]) -> Optional[CalendarEvent]:
        """Merge ``updates`` (wire keys) into the base event behind ``event_id``.

        Returns:
            The updated base event, or None if no such event exists

        Raises:
            pydantic.ValidationError: If the merged event is invalid
            EventStoreError: If the store cannot be written
        """
        base_id = resolve_base_id(event_id)
        with self._lock:
            index = self._index_locked(base_id)
            if index is None:
                logger.info("Update ignored; no event %s", base_id)
                return None

            previous = self._events[index]
            merged = {**previous.to_wire(), **updates, "id": base_id}
            updated = CalendarEvent.model_validate(merged)
            self._events[index] = updated
            try:
                self._persist_locked()
            except EventStoreError:
                self._events[index] = previous
                raise

        logger.info("Updated event %s", base_id)
        return updated

    def delete_event(self, event_id: str) -> bool:
        """Delete the base event behind ``event_id``; True if something was removed."""
        base_id = resolve_base_id(event_id)
        with self._lock:
            index = self._index_locked(base_id)
            if index is None:
                return False
            removed = self._events.pop(index)
            try:
                self._persist_locked()
            except EventStoreError:
                self._events.insert(index, removed)
                raise

        logger.info("Deleted event %s", base_id)
        return True

    def get_events_for_period(self, view_start: datetime, view_end: datetime) -> PeriodQueryResult:
        """Run a period query over a snapshot of the store."""
        return get_events_for_period(self.snapshot(), view_start, view_end, self._settings)

    def _find_locked(self, base_id: str) -> Optional[CalendarEvent]:
        index = self._index_locked(base_id)
        return None if index is None else self._events[index]

    def _index_locked(self, base_id: str) -> Optional[int]:
        for i, event in enumerate(self._events):
            if event.id == base_id:
                return i
        return None

    def _persist_locked(self) -> None:
        """Write all events to disk atomically. Called with lock held.

        Writes to a temporary file in the same directory then replaces the
        store file.
        """
        data = [event.to_wire() for event in self._events]
        tmp_path: Optional[Path] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=self._path.parent, delete=False, encoding="utf-8", suffix=".tmp"
            ) as tf:
                tmp_path = Path(tf.name)
                json.dump(data, tf, ensure_ascii=False, indent=2)
                tf.flush()
                with contextlib.suppress(OSError):
                    os.fsync(tf.fileno())
            tmp_path.replace(self._path)
        except OSError as exc:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    tmp_path.unlink()
            raise EventStoreError(f"Failed to persist event store {self._path}: {exc}") from exc
