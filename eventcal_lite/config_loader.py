"""eventcal_lite.config_loader

Lightweight config loader for eventcal_lite.

- Reads YAML with PyYAML (JSON files load too, JSON being a YAML subset).
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
- `EVENTCAL_TIMEZONE` and `EVENTCAL_LOG_LEVEL` override file values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def _valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


@dataclass
class Config:
    """Typed configuration for eventcal_lite.

    Fields:
        timezone: IANA name of the site timezone stored datetimes are local to
        max_range_days: widest query window accepted by the query boundary
        max_limit: upper clamp for the ``limit`` query parameter
        upcoming_range_days: how far ahead ``upcoming()`` looks
        upcoming_limit: default number of upcoming occurrences
        log_level: logging level name
    """

    timezone: str = DEFAULT_TIMEZONE
    max_range_days: int = 366
    max_limit: int = 500
    upcoming_range_days: int = 60
    upcoming_limit: int = 5
    log_level: str = "INFO"

    @property
    def tzinfo(self) -> tzinfo:
        """Resolved site timezone."""
        return ZoneInfo(self.timezone)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int and bounded to at least 1; an
        unknown timezone falls back to UTC. Coercions are logged as warnings.
        """
        if data is None:
            data = {}

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                value = int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default
            if value < 1:
                logger.warning("Config %s=%d below minimum; coercing to 1", key, value)
                return 1
            return value

        timezone = str(data.get("timezone") or DEFAULT_TIMEZONE)
        if not _valid_timezone(timezone):
            logger.warning("Config timezone %r is unknown; falling back to %s", timezone, DEFAULT_TIMEZONE)
            timezone = DEFAULT_TIMEZONE

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(
            timezone=timezone,
            max_range_days=_coerce_int("max_range_days", 366),
            max_limit=_coerce_int("max_limit", 500),
            upcoming_range_days=_coerce_int("upcoming_range_days", 60),
            upcoming_limit=_coerce_int("upcoming_limit", 5),
            log_level=log_level,
        )


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    env_tz = os.environ.get("EVENTCAL_TIMEZONE", "").strip()
    if env_tz:
        merged["timezone"] = env_tz
    env_level = os.environ.get("EVENTCAL_LOG_LEVEL", "").strip()
    if env_level:
        merged["log_level"] = env_level
    return merged


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML/JSON file and return a Config instance.

    Args:
        path: Optional path to the config file. If not provided the default is
              ./eventcal_lite/config.yaml (relative to current working dir).

    Returns:
        Config dataclass instance with values from file (or defaults).

    Behavior:
    - If file is missing: returns defaults (plus environment overrides).
    - If file exists but top-level is not a mapping: raises ValueError.
    """
    p = Path(path) if path else Path.cwd() / "eventcal_lite" / "config.yaml"
    logger.debug("Attempting to load config from %s", p)

    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config.from_dict(_apply_env_overrides({}))

    raw = yaml.safe_load(p.read_text())
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004

    cfg = Config.from_dict(_apply_env_overrides(raw))
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
