"""Unit tests for eventide.domain.event_store."""

import json
import logging
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from eventide.domain.event_store import EventStore
from eventide.exceptions import EventStoreError

pytestmark = pytest.mark.unit

UTC = timezone.utc

STANDUP = {
    "title": "Standup",
    "start": "2024-03-04T09:00:00.000Z",
    "end": "2024-03-04T09:15:00.000Z",
    "allDay": False,
    "recurrence": {"frequency": "weekly", "interval": 1, "daysOfWeek": [1, 2, 3, 4, 5]},
}


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "events.json"


@pytest.fixture
def store(store_path):
    return EventStore(store_path)


class TestEventStoreLoad:
    def test_missing_file_starts_empty(self, store, store_path):
        assert store.snapshot() == []
        assert not store_path.exists()

    def test_skips_malformed_records(self, store_path, caplog):
        store_path.write_text(
            json.dumps(
                [
                    {"id": "ok", "title": "Fine", "start": "2024-03-01T09:00:00.000Z",
                     "end": "2024-03-01T10:00:00.000Z"},
                    {"id": "broken"},
                ]
            )
        )
        with caplog.at_level(logging.WARNING):
            store = EventStore(store_path)
        assert [e.id for e in store.snapshot()] == ["ok"]
        assert "Skipping malformed event record 1" in caplog.text

    def test_invalid_json_raises(self, store_path):
        store_path.write_text("{not json")
        with pytest.raises(EventStoreError):
            EventStore(store_path)

    def test_invalid_utf8_raises(self, store_path):
        store_path.write_bytes(b'[{"id":"\xff"}]')
        with pytest.raises(EventStoreError):
            EventStore(store_path)

    def test_non_list_root_raises(self, store_path):
        store_path.write_text(json.dumps({"events": []}))
        with pytest.raises(EventStoreError):
            EventStore(store_path)


class TestEventStoreMutations:
    def test_add_assigns_id_and_persists(self, store, store_path):
        event = store.add_event({**STANDUP, "id": "ignored"})
        assert event.id != "ignored"
        assert "-occurrence-" not in event.id

        on_disk = json.loads(store_path.read_text())
        assert on_disk == [event.to_wire()]
        assert on_disk[0]["recurrence"]["daysOfWeek"] == [1, 2, 3, 4, 5]

    def test_reload_round_trips(self, store, store_path):
        added = store.add_event(STANDUP)
        reloaded = EventStore(store_path)
        assert reloaded.snapshot() == [added]

    def test_add_invalid_event_raises_and_stores_nothing(self, store, store_path):
        with pytest.raises(ValidationError):
            store.add_event({"title": "No times"})
        assert store.snapshot() == []
        assert not store_path.exists()

    def test_lookup_by_occurrence_id_returns_base(self, store):
        added = store.add_event(STANDUP)
        found = store.get_event_by_id(f"{added.id}-occurrence-20240305090000")
        assert found == added

    def test_update_by_occurrence_id_changes_base(self, store):
        added = store.add_event(STANDUP)
        updated = store.update_event(
            f"{added.id}-occurrence-20240305090000", {"title": "Daily sync"}
        )
        assert updated is not None
        assert updated.id == added.id
        assert updated.title == "Daily sync"
        assert updated.start == added.start
        assert store.get_event_by_id(added.id).title == "Daily sync"

    def test_update_rejects_invalid_merge(self, store):
        added = store.add_event(STANDUP)
        with pytest.raises(ValidationError):
            store.update_event(added.id, {"allDay": "sometimes"})
        assert store.get_event_by_id(added.id) == added

    def test_update_missing_event(self, store):
        assert store.update_event("nope", {"title": "x"}) is None

    def test_delete_by_occurrence_id_removes_whole_series(self, store, store_path):
        added = store.add_event(STANDUP)
        assert store.delete_event(f"{added.id}-occurrence-20240306090000") is True
        assert store.snapshot() == []
        assert json.loads(store_path.read_text()) == []

    def test_delete_missing_event(self, store):
        assert store.delete_event("nope") is False

    def test_snapshot_is_a_copy(self, store):
        store.add_event(STANDUP)
        snapshot = store.snapshot()
        snapshot.clear()
        assert len(store.snapshot()) == 1

    def test_write_failure_rolls_back(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        # The parent "directory" is a regular file, so the write must fail.
        store = EventStore(blocker / "events.json")
        with pytest.raises(EventStoreError):
            store.add_event(STANDUP)
        assert store.snapshot() == []


class TestEventStorePeriodQuery:
    def test_expands_stored_events(self, store):
        added = store.add_event(STANDUP)
        result = store.get_events_for_period(
            datetime(2024, 3, 4, tzinfo=UTC), datetime(2024, 3, 10, tzinfo=UTC)
        )
        assert [e.id for e in result.events] == [
            f"{added.id}-occurrence-2024030{day}090000" for day in (4, 5, 6, 7, 8)
        ]

    def test_uses_store_settings(self, store_path):
        store = EventStore(store_path, settings={"iteration_ceiling_days": 2})
        store.add_event({**STANDUP, "recurrence": {"frequency": "daily"}})
        result = store.get_events_for_period(
            datetime(2024, 3, 1, tzinfo=UTC), datetime(2024, 3, 31, tzinfo=UTC)
        )
        assert len(result.events) == 2
