"""Unit tests for eventide logging setup."""

import logging

import pytest

from eventide import _init_logging
from eventide.logging_config import EVENTIDE_MODULES, configure_logging, get_logging_status

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_logger_levels():
    names = [None, *EVENTIDE_MODULES]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestConfigureLogging:
    def test_default_is_info(self):
        configure_logging()
        status = get_logging_status()
        assert status["root"] == "INFO"
        assert all(status[name] == "INFO" for name in EVENTIDE_MODULES)

    def test_debug_mode(self):
        configure_logging(debug_mode=True)
        assert logging.getLogger("eventide.calendar.recurrence_expander").level == logging.DEBUG

    def test_debug_from_environment(self, monkeypatch):
        monkeypatch.setenv("EVENTIDE_DEBUG", "yes")
        configure_logging()
        assert get_logging_status()["eventide"] == "DEBUG"

    def test_force_debug_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("EVENTIDE_DEBUG", "1")
        configure_logging(force_debug=False)
        assert get_logging_status()["eventide"] == "INFO"

    def test_log_level_env_sets_root(self, monkeypatch):
        monkeypatch.setenv("EVENTIDE_LOG_LEVEL", "warning")
        configure_logging()
        assert logging.getLogger().level == logging.WARNING


class TestInitLogging:
    def test_sets_root_level(self):
        _init_logging("error")
        assert logging.getLogger().level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self):
        _init_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_debug_env_forces_debug(self, monkeypatch):
        monkeypatch.setenv("EVENTIDE_DEBUG", "on")
        _init_logging("ERROR")
        assert logging.getLogger().level == logging.DEBUG
