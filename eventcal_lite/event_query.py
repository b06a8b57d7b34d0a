"""Query boundary for eventcal_lite.

Policies that belong to the calling layer rather than the engine: validating
and capping the requested window, clamping result limits, month and upcoming
windows, and shaping expanded occurrences into a JSON-ready payload.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping
from datetime import datetime, timedelta, tzinfo
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from .config_loader import Config
from .lite_datetime_utils import as_utc, parse_datetime_value
from .lite_exceptions import LiteQueryValidationError
from .lite_models import Occurrence, Rule
from .lite_rrule_expander import expand

logger = logging.getLogger(__name__)

EventOccurrence = tuple[Hashable, Occurrence]


def _start_instant(item: EventOccurrence) -> datetime:
    return as_utc(item[1].start)


def _log_invalid_request(code: str, context: dict[str, Any]) -> None:
    logger.warning("Events request rejected: %s %s", code, context)


def parse_query_range(start: Any, end: Any, config: Config) -> tuple[datetime, datetime]:
    """Validate and normalize a requested window.

    Args:
        start: Window start as supplied by the client
        end: Window end as supplied by the client
        config: Supplies the site timezone and the maximum window size

    Returns:
        (range_start, range_end) as aware datetimes in the site timezone

    Raises:
        LiteQueryValidationError: missing_range, invalid_range or range_too_large
    """
    if start in (None, "") or end in (None, ""):
        _log_invalid_request("missing_range", {"start": start, "end": end})
        raise LiteQueryValidationError("missing_range", "start and end parameters are required.")

    tz = config.tzinfo
    range_start = parse_datetime_value(start, tz)
    range_end = parse_datetime_value(end, tz)

    if range_start is None or range_end is None:
        _log_invalid_request("invalid_range", {"start": start, "end": end})
        raise LiteQueryValidationError(
            "invalid_range", "Invalid date format. Provide ISO8601 or Y-m-d."
        )

    if range_end < range_start:
        _log_invalid_request(
            "invalid_range", {"reason": "end_before_start", "start": start, "end": end}
        )
        raise LiteQueryValidationError("invalid_range", "End date must be after start date.")

    if (range_end - range_start).days > config.max_range_days:
        _log_invalid_request("range_too_large", {"start": start, "end": end})
        raise LiteQueryValidationError(
            "range_too_large",
            f"Requested range is too large. Please query {config.max_range_days} days or less.",
        )

    return range_start, range_end


def sanitize_limit(value: Any, max_limit: int) -> Optional[int]:
    """Clamp a requested result limit to ``[1, max_limit]``; None means unlimited.

    Raises:
        LiteQueryValidationError: If the value is not an integer
    """
    if value is None or value == "":
        return None

    try:
        limit = int(value)
    except (TypeError, ValueError) as e:
        _log_invalid_request("invalid_limit", {"limit": value})
        raise LiteQueryValidationError("invalid_limit", "limit must be an integer.") from e

    return min(max_limit, max(1, limit))


def month_window(year: int, month: int, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the first and last second of a calendar month in ``tz``."""
    first = datetime(year, month, 1, tzinfo=tz)
    last = first + relativedelta(day=31, hour=23, minute=59, second=59)
    return first, last


def expand_events(
    rules: Mapping[Hashable, Rule], range_start: datetime, range_end: datetime
) -> list[EventOccurrence]:
    """Expand several events over one window, merged and ordered by start."""
    items: list[EventOccurrence] = []
    for event_id, rule in rules.items():
        items.extend((event_id, occurrence) for occurrence in expand(rule, range_start, range_end))
    items.sort(key=_start_instant)
    return items


def group_by_day(items: list[EventOccurrence]) -> dict[str, list[EventOccurrence]]:
    """Group occurrences by local start date (``YYYY-MM-DD``), each day ordered by start."""
    days: dict[str, list[EventOccurrence]] = {}
    for item in sorted(items, key=_start_instant):
        days.setdefault(item[1].start.strftime("%Y-%m-%d"), []).append(item)
    return dict(sorted(days.items()))


def month_events(
    rules: Mapping[Hashable, Rule], year: int, month: int, config: Config
) -> dict[str, list[EventOccurrence]]:
    """Occurrences of ``rules`` during one month, grouped by day."""
    range_start, range_end = month_window(year, month, config.tzinfo)
    return group_by_day(expand_events(rules, range_start, range_end))


def upcoming(
    rules: Mapping[Hashable, Rule],
    now: datetime,
    config: Config,
    limit: Optional[int] = None,
) -> list[EventOccurrence]:
    """Next occurrences starting at or after ``now`` within the upcoming window.

    A ``limit`` below 1 is treated as 1; None uses ``config.upcoming_limit``.
    """
    range_end = now + timedelta(days=config.upcoming_range_days)
    now_utc = as_utc(now)
    items = [item for item in expand_events(rules, now, range_end) if _start_instant(item) >= now_utc]
    wanted = max(1, limit if limit is not None else config.upcoming_limit)
    return items[:wanted]


def build_payload(
    range_start: datetime,
    range_end: datetime,
    items: list[EventOccurrence],
    limit: Optional[int] = None,
) -> dict[str, Any]:
    """Shape expanded occurrences into a JSON-ready response body.

    Returns:
        ``{"start", "end", "count", "occurrences": [{"event_id", "start", "end"}]}``
        with ISO-8601 strings; ``end`` is None for occurrences without duration
    """
    ordered = sorted(items, key=_start_instant)
    if limit is not None:
        ordered = ordered[:limit]

    occurrences = [
        {"event_id": event_id, **occurrence.model_dump(mode="json")}
        for event_id, occurrence in ordered
    ]

    return {
        "start": range_start.isoformat(),
        "end": range_end.isoformat(),
        "count": len(occurrences),
        "occurrences": occurrences,
    }