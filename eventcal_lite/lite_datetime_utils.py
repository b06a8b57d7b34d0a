"""DateTime helpers for recurrence expansion - eventcal_lite.

All helpers take the target timezone explicitly; nothing here consults a
process-wide or site-wide default.
"""

import logging
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Any, Optional

from dateutil import parser as date_parser

from .lite_exceptions import LiteUnrepresentableDateError

logger = logging.getLogger(__name__)

STORAGE_FORMAT = "%Y-%m-%d %H:%M:%S"
UNTIL_FORMAT = "%Y%m%dT%H%M%SZ"


def ensure_timezone_aware(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Attach ``tz`` (UTC when omitted) to a naive datetime.

    Args:
        dt: Datetime to make timezone-aware
        tz: Timezone assumed for naive input

    Returns:
        Timezone-aware datetime; aware input is returned unchanged
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz or UTC)
    return dt


def to_timezone(dt: datetime, tz: tzinfo) -> datetime:
    """Express ``dt`` in ``tz``, interpreting naive values as already local to ``tz``."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def as_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive input is taken as UTC).

    Aware datetimes sharing one tzinfo compare by wall clock and ignore
    ``fold``; comparing their UTC forms orders the two 01:30 instants of a
    fall-back night correctly.
    """
    return ensure_timezone_aware(dt).astimezone(UTC)


def normalize_instant(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Round-trip ``dt`` through UTC into ``tz`` (its own zone when omitted).

    A wall time skipped by a spring-forward gap (02:30 on the transition day)
    resolves to the instant it denotes with the pre-transition offset, e.g.
    03:30 daylight time.
    """
    aware = ensure_timezone_aware(dt)
    return as_utc(aware).astimezone(tz or aware.tzinfo)


def canonical_key(dt: datetime, tz: Optional[tzinfo] = None) -> str:
    """Return the offset-qualified identity string of an instant.

    The explicit UTC offset keeps the two 01:30 instants of a daylight-saving
    fall-back night apart. Equal instants always give equal keys.

    Examples:
        >>> canonical_key(datetime(2024, 1, 1, 9, 0, tzinfo=UTC))
        '2024-01-01T09:00:00+00:00'
    """
    if tz is not None:
        dt = to_timezone(dt, tz)
    return normalize_instant(dt).isoformat(timespec="seconds")


def parse_datetime_value(value: Any, tz: tzinfo) -> Optional[datetime]:
    """Parse a stored or user-supplied datetime into ``tz``.

    Accepts ``datetime`` and ``date`` objects as well as strings in any format
    dateutil understands (``YYYY-MM-DD HH:MM:SS``, ISO-8601, ``YYYY-MM-DD``).

    Returns:
        Aware datetime in ``tz``, or None when the value is blank or unparseable
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_timezone(value, tz)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=tz)

    text = str(value).strip()
    if not text:
        return None

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError) as e:
        logger.debug("Unparseable datetime %r: %s", text, e)
        return None

    return to_timezone(parsed, tz)


def parse_until(value: str) -> datetime:
    """Parse an RRULE UNTIL value (``YYYYMMDDTHHMMSSZ``) into an aware UTC datetime.

    Raises:
        LiteUnrepresentableDateError: If the value is not a valid UTC timestamp
    """
    try:
        return datetime.strptime(value.strip().upper(), UNTIL_FORMAT).replace(tzinfo=UTC)
    except ValueError as e:
        raise LiteUnrepresentableDateError(f"Invalid UNTIL value {value!r}: {e}") from e


def format_storage(dt: datetime, tz: tzinfo) -> str:
    """Format ``dt`` as ``YYYY-MM-DD HH:MM:SS`` in ``tz``."""
    return to_timezone(dt, tz).strftime(STORAGE_FORMAT)


def first_weekday_on_or_after(dt: datetime, weekday: int) -> datetime:
    """Return the first datetime on or after ``dt`` falling on ``weekday`` (0=Monday)."""
    return dt + timedelta(days=(weekday - dt.weekday()) % 7)
