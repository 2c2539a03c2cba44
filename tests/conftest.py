"""Shared fixtures for eventide tests."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any, Callable

import pytest

from eventide.calendar.models import CalendarEvent

EVENTIDE_ENV_VARS = (
    "EVENTIDE_DEBUG",
    "EVENTIDE_LOG_LEVEL",
    "EVENTIDE_STORE_PATH",
    "EVENTIDE_ITERATION_CEILING",
    "EVENTIDE_WEEK_STARTS_ON",
    "EVENTIDE_DEFAULT_COLOR",
    "EVENTIDE_TEST_TIME",
)


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "unit: fast, isolated unit tests")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Ensure EVENTIDE_* variables from the host never leak into a test."""
    for name in EVENTIDE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def make_event() -> Callable[..., CalendarEvent]:
    """Factory for base events using wire-format keys.

    Defaults describe a one-hour, non-recurring event on 2024-03-01 09:00 UTC;
    any field can be overridden, ``recurrence`` as a plain dict.
    """

    def _make(**overrides: Any) -> CalendarEvent:
        data: dict[str, Any] = {
            "id": "base-1",
            "title": "Test event",
            "color": "blue",
            "start": "2024-03-01T09:00:00.000Z",
            "end": "2024-03-01T10:00:00.000Z",
            "allDay": False,
            "recurrence": {"frequency": "none"},
        }
        data.update(overrides)
        return CalendarEvent.model_validate(data)

    return _make
