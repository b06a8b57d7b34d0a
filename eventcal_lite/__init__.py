"""eventcal_lite - recurrence expansion for calendar events.

Expands an event's start/end, RRULE text and explicit exception/addition
dates into the concrete occurrences inside a query window.
"""

__version__ = "0.1.0"

from typing import Optional

from .lite_exceptions import (
    LiteQueryValidationError,
    LiteRecurrenceError,
    LiteRRuleParseError,
    LiteUnrepresentableDateError,
)
from .lite_models import Occurrence, Rule
from .lite_rrule_expander import RecurrenceEngine, expand


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Honors the EVENTCAL_DEBUG environment variable (truthy values: "1", "true",
    "yes", "on"), which forces DEBUG verbosity to surface per-candidate
    expansion logs during troubleshooting.
    """
    import logging
    import os
    import sys

    debug_env = os.environ.get("EVENTCAL_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure basic handler if no handlers are present to avoid duplicate output.
    if not root.handlers:
        from colorlog import ColoredFormatter

        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message, only the level colorized
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


__all__ = [
    "LiteQueryValidationError",
    "LiteRRuleParseError",
    "LiteRecurrenceError",
    "LiteUnrepresentableDateError",
    "Occurrence",
    "RecurrenceEngine",
    "Rule",
    "expand",
]
