"""eventide.config_loader

Config loader for eventide.

- Reads YAML (PyYAML) from ``eventide.yaml`` or an explicit path.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override and a mapping of overrides (e.g. from the
  environment, see ``eventide.core.config_manager``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from eventide.calendar.recurrence_expander import DEFAULT_ITERATION_CEILING_DAYS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "eventide.yaml"
MAX_ITERATION_CEILING_DAYS = 36500


@dataclass
class Config:
    """Typed configuration for eventide.

    Fields:
        store_path: JSON file holding the base events
        iteration_ceiling_days: safety bound on recurrence expansion (1..36500)
        week_starts_on: first weekday of a month-grid row, 0 = Sunday (0..6)
        default_color: color assigned to new events that do not name one
        log_level: logging level name
    """

    store_path: str = "events.json"
    iteration_ceiling_days: int = DEFAULT_ITERATION_CEILING_DAYS
    week_starts_on: int = 0
    default_color: str = "blue"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int; out-of-range values are
        clamped with a warning.
        """
        if data is None:
            data = {}

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default

        ceiling = _coerce_int("iteration_ceiling_days", DEFAULT_ITERATION_CEILING_DAYS)
        if ceiling < 1:
            logger.warning("iteration_ceiling_days %d below minimum; coercing to 1", ceiling)
            ceiling = 1
        elif ceiling > MAX_ITERATION_CEILING_DAYS:
            logger.warning(
                "iteration_ceiling_days %d above maximum; coercing to %d",
                ceiling,
                MAX_ITERATION_CEILING_DAYS,
            )
            ceiling = MAX_ITERATION_CEILING_DAYS

        week_starts_on = _coerce_int("week_starts_on", 0)
        if not 0 <= week_starts_on <= 6:
            logger.warning("week_starts_on %d out of range 0..6; using 0", week_starts_on)
            week_starts_on = 0

        store_path = data.get("store_path") or "events.json"
        default_color = data.get("default_color") or "blue"

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(
            store_path=str(store_path),
            iteration_ceiling_days=ceiling,
            week_starts_on=week_starts_on,
            default_color=str(default_color),
            log_level=log_level,
        )


def _load_yaml(path: Path) -> Any:
    """Load a YAML document; an empty file yields an empty mapping.

    Raises:
        ValueError: If the file cannot be read or is not valid YAML
    """
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Failed to load config file {path}: {exc}") from exc
    return {} if loaded is None else loaded


def load_config(path: str | None = None, overrides: dict[str, Any] | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to ./eventide.yaml.
        overrides: Values that take precedence over the file (e.g. environment)

    Returns:
        Config dataclass instance with values from file, overrides, or defaults.

    Behavior:
    - If file is missing: defaults (plus overrides) are used.
    - If file is not valid YAML or its top-level is not a mapping: raises ValueError.
    """
    p = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_FILENAME
    logger.debug("Attempting to load config from %s", p)

    raw: dict[str, Any] = {}
    if p.exists():
        loaded = _load_yaml(p)
        if not isinstance(loaded, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, loaded)
            raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
        raw = loaded
        logger.info("Loaded configuration from %s", p)
    else:
        logger.info("Config file %s not found; using defaults", p)

    if overrides:
        raw = {**raw, **overrides}

    cfg = Config.from_dict(raw)
    logger.debug("Configuration values: %s", cfg)
    return cfg
