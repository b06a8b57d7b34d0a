"""Build Rules from stored event fields.

Stored events keep their recurrence inputs as flat meta values: datetimes as
``YYYY-MM-DD HH:MM:SS`` strings local to the site timezone, exception and
addition dates as JSON arrays of the same format (absent or empty when there
are none), the RRULE text, and an all-day flag. The site timezone is always
passed in explicitly.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, tzinfo
from typing import Any, Optional

from .lite_datetime_utils import format_storage, parse_datetime_value, to_timezone
from .lite_models import Rule
from .lite_rrule_parser import sanitize_rrule

logger = logging.getLogger(__name__)

META_START = "_event_start"
META_END = "_event_end"
META_ALL_DAY = "_event_all_day"
META_RRULE = "_event_rrule"
META_EXDATES = "_event_exdates"
META_RDATES = "_event_rdates"

_TRUTHY = ("1", "true", "yes", "on")


def normalize_datetime(value: Any, tz: tzinfo) -> str:
    """Normalize a datetime value to the storage format in ``tz``.

    Returns:
        ``YYYY-MM-DD HH:MM:SS`` string, or ``""`` for blank/unparseable input
    """
    parsed = parse_datetime_value(value, tz)
    if parsed is None:
        return ""
    return format_storage(parsed, tz)


def _load_array(raw: Any) -> list[Any]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    try:
        decoded = json.loads(str(raw))
    except json.JSONDecodeError:
        logger.debug("Stored datetime array is not valid JSON: %r", raw)
        return []
    if not isinstance(decoded, list):
        return []
    return decoded


def decode_datetime_array(raw: Any, tz: tzinfo) -> list[str]:
    """Decode a stored JSON array (or list) into normalized datetime strings.

    Entries that cannot be parsed are dropped.
    """
    normalized = [normalize_datetime(value, tz) for value in _load_array(raw)]
    return [value for value in normalized if value]


def encode_datetime_array(values: Iterable[Any], tz: tzinfo) -> str:
    """Encode datetimes for storage as a de-duplicated JSON array; ``""`` when empty."""
    unique: list[str] = []
    for value in values:
        normalized = normalize_datetime(value, tz)
        if normalized and normalized not in unique:
            unique.append(normalized)
    return json.dumps(unique) if unique else ""


def _parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def _parse_collection(raw: Any, tz: tzinfo) -> list[datetime]:
    dates = []
    for value in decode_datetime_array(raw, tz):
        parsed = parse_datetime_value(value, tz)
        if parsed is not None:
            dates.append(parsed)
    return dates


def rule_from_meta(meta: Mapping[str, Any], tz: tzinfo, now: Optional[datetime] = None) -> Rule:
    """Construct a Rule from stored event fields.

    Args:
        meta: Mapping of meta keys to stored values
        tz: Site timezone the stored datetimes are local to
        now: Fallback start when the stored start is missing or unparseable

    Returns:
        Rule anchored to ``tz``
    """
    start = parse_datetime_value(meta.get(META_START), tz)
    if start is None:
        fallback = now or datetime.now(tz)
        logger.warning(
            "Stored start %r is missing or invalid; falling back to %s",
            meta.get(META_START),
            fallback.isoformat(),
        )
        start = to_timezone(fallback, tz)

    return Rule(
        start=start,
        end=parse_datetime_value(meta.get(META_END), tz),
        rrule_text=sanitize_rrule(meta.get(META_RRULE)),
        exdates=_parse_collection(meta.get(META_EXDATES), tz),
        rdates=_parse_collection(meta.get(META_RDATES), tz),
        is_all_day=_parse_flag(meta.get(META_ALL_DAY)),
    )
