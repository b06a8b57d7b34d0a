"""
Central logging configuration for eventcal_lite.

Keeps recurrence diagnostics (grammar fallbacks, rejected query ranges) visible
at WARNING while letting per-candidate debug output be switched on for
troubleshooting.
"""

import logging
import os
from typing import Optional

LITE_MODULES = [
    "eventcal_lite",
    "eventcal_lite.__main__",
    "eventcal_lite.lite_models",
    "eventcal_lite.lite_rrule_expander",
    "eventcal_lite.lite_rrule_parser",
    "eventcal_lite.lite_datetime_utils",
    "eventcal_lite.meta_loader",
    "eventcal_lite.event_query",
    "eventcal_lite.config_loader",
]

# Third-party libraries that generate excessive debug logs
NOISY_LOGGERS = [
    "dateutil",
    "pydantic",
    "yaml",
]


def configure_lite_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Configure logging levels for eventcal_lite.

    Args:
        debug_mode: Whether to enable debug logging for eventcal_lite modules
        force_debug: Override debug mode setting (None to use env var detection)
        log_level: Root level name used outside debug mode (e.g. from config)

    Environment Variables:
        EVENTCAL_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        EVENTCAL_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("EVENTCAL_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("EVENTCAL_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if not final_debug and log_level and log_level.upper() in ("INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, log_level.upper())
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s")
        )
        root_logger.addHandler(handler)

    logger_config: dict[str, int] = {name: logging.WARNING for name in NOISY_LOGGERS}

    lite_level = logging.DEBUG if final_debug else logging.INFO
    for module in LITE_MODULES:
        logger_config[module] = lite_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for eventcal_lite modules.")
    else:
        root_logger.info("Production logging configuration applied.")


def reset_logging_to_debug() -> None:
    """
    Reset all loggers to DEBUG level for troubleshooting.
    """
    logging.getLogger().setLevel(logging.DEBUG)

    for logger_name in NOISY_LOGGERS + LITE_MODULES:
        logging.getLogger(logger_name).setLevel(logging.DEBUG)

    logging.getLogger().info("All loggers reset to DEBUG level for troubleshooting")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}

    for logger_name in ["eventcal_lite", "eventcal_lite.lite_rrule_expander", "dateutil"]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)

    return status
