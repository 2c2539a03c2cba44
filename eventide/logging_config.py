"""
Central logging configuration for eventide.

Sets levels for the eventide module loggers once the root handler exists
(see ``eventide._init_logging``). Debug output can be forced from the
environment for troubleshooting without changing code.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

EVENTIDE_MODULES = [
    "eventide",
    "eventide.calendar.recurrence_expander",
    "eventide.calendar.event_sorter",
    "eventide.domain.period_query",
    "eventide.domain.event_store",
    "eventide.config_loader",
]


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for eventide.

    Args:
        debug_mode: Whether to enable debug logging for eventide modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        EVENTIDE_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        EVENTIDE_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("EVENTIDE_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("EVENTIDE_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    module_level = logging.DEBUG if final_debug else logging.INFO
    for module in EVENTIDE_MODULES:
        logging.getLogger(module).setLevel(module_level)

    if final_debug:
        root_logger.debug("Debug logging enabled for eventide modules")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in EVENTIDE_MODULES:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
