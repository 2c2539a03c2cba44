"""Configuration from environment variables and .env files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file and set environment variables.

        Only sets variables that are not already in the environment to avoid
        surprising overrides of user's environment.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []

        try:
            content = self.env_file_path.read_text(encoding="utf-8")
        except OSError:
            logger.debug(
                "Failed to read .env file for defaults (continuing): %s",
                str(self.env_file_path),
                exc_info=True,
            )
            return []

        for raw_line in content.splitlines():
            line = raw_line.strip()

            # Skip empty lines and comments
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, val = line.split("=", 1)
            key = key.strip()
            val = val.strip().strip('"').strip("'")

            if key and key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from environment variables.

        Recognizes:
        - EVENTIDE_STORE_PATH -> 'store_path'
        - EVENTIDE_ITERATION_CEILING -> 'iteration_ceiling_days' (int)
        - EVENTIDE_WEEK_STARTS_ON -> 'week_starts_on' (int, 0 = Sunday)
        - EVENTIDE_DEFAULT_COLOR -> 'default_color'
        - EVENTIDE_LOG_LEVEL -> 'log_level'

        Returns:
            Configuration overrides compatible with ``load_config``
        """
        cfg: dict[str, Any] = {}

        store_path = os.environ.get("EVENTIDE_STORE_PATH")
        if store_path:
            cfg["store_path"] = store_path

        for env_key, cfg_key in (
            ("EVENTIDE_ITERATION_CEILING", "iteration_ceiling_days"),
            ("EVENTIDE_WEEK_STARTS_ON", "week_starts_on"),
        ):
            raw = os.environ.get(env_key)
            if not raw:
                continue
            try:
                cfg[cfg_key] = int(raw)
            except ValueError:
                logger.warning("Invalid %s=%r; ignoring", env_key, raw)

        color = os.environ.get("EVENTIDE_DEFAULT_COLOR")
        if color:
            cfg["default_color"] = color

        log_level = os.environ.get("EVENTIDE_LOG_LEVEL")
        if log_level:
            cfg["log_level"] = log_level

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment.

        This is the main entry point for loading configuration overrides.
        """
        self.load_env_file()
        return self.build_config_from_env()
