"""RRULE grammar parsing for eventcal_lite.

Turns the semicolon-delimited ``KEY=VALUE`` recurrence text into one of three
structured rule variants. Keys each variant does not understand (BYDAY on a
monthly rule, BYMONTHDAY on a weekly one) are dropped, so those combinations
cannot be represented.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from .lite_datetime_utils import parse_until
from .lite_exceptions import LiteRRuleParseError, LiteUnrepresentableDateError

logger = logging.getLogger(__name__)

WEEKDAY_CODES: dict[str, int] = {
    "MO": 0,
    "TU": 1,
    "WE": 2,
    "TH": 3,
    "FR": 4,
    "SA": 5,
    "SU": 6,
}


class Frequency(str, Enum):
    """Supported recurrence frequencies."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


@dataclass(frozen=True)
class _BaseRule:
    interval: int = 1
    count: Optional[int] = None
    until: Optional[datetime] = None

    @property
    def effective_count(self) -> Optional[int]:
        """COUNT only terminates the series when UNTIL is absent."""
        return self.count if self.until is None else None


@dataclass(frozen=True)
class DailyRule(_BaseRule):
    """Every ``interval`` days from the start."""

    freq = Frequency.DAILY


@dataclass(frozen=True)
class WeeklyRule(_BaseRule):
    """Every ``interval`` weeks on each weekday in ``by_weekday`` (0=Monday)."""

    by_weekday: frozenset[int] = frozenset()

    freq = Frequency.WEEKLY


@dataclass(frozen=True)
class MonthlyRule(_BaseRule):
    """Every ``interval`` months on day ``by_month_day``."""

    by_month_day: int = 1

    freq = Frequency.MONTHLY


StructuredRule = Union[DailyRule, WeeklyRule, MonthlyRule]


def sanitize_rrule(text: Optional[str]) -> str:
    """Strip whitespace and a leading ``RRULE:`` prefix."""
    text = str(text or "").strip()
    if text[:6].upper() == "RRULE:":
        text = text[6:]
    return text.strip()


def split_rrule_parts(rrule_text: str) -> dict[str, str]:
    """Split RRULE text into an upper-cased key -> stripped value mapping.

    Empty segments are ignored; later duplicates win.

    Raises:
        LiteRRuleParseError: If a segment is not a ``KEY=VALUE`` pair
    """
    parts: dict[str, str] = {}

    for segment in rrule_text.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        if "=" not in segment:
            raise LiteRRuleParseError(f"Malformed RRULE segment {segment!r}")

        key, value = segment.split("=", 1)
        key = key.strip().upper()
        if not key:
            raise LiteRRuleParseError(f"Malformed RRULE segment {segment!r}")
        parts[key] = value.strip()

    return parts


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise LiteRRuleParseError(f"{key} must be an integer, got {value!r}") from e


def _parse_weekdays(value: str, start: datetime) -> frozenset[int]:
    weekdays = set()
    for code in value.split(","):
        code = code.strip().upper()
        if code in WEEKDAY_CODES:
            weekdays.add(WEEKDAY_CODES[code])
        elif code:
            logger.debug("Dropping unknown BYDAY code %r", code)

    if not weekdays:
        weekdays.add(start.weekday())
    return frozenset(weekdays)


def parse_rrule(rrule_text: str, start: datetime) -> StructuredRule:
    """Parse RRULE text into a structured rule.

    Args:
        rrule_text: RRULE string, e.g. "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE"
        start: Series start; supplies the default weekday and day of month

    Returns:
        DailyRule, WeeklyRule or MonthlyRule

    Raises:
        LiteRRuleParseError: If any segment is malformed
    """
    text = sanitize_rrule(rrule_text)
    if not text:
        raise LiteRRuleParseError("Empty RRULE string")

    parts = split_rrule_parts(text)

    freq_raw = parts.pop("FREQ", "").upper()
    if not freq_raw:
        raise LiteRRuleParseError("RRULE missing required FREQ parameter")
    try:
        freq = Frequency(freq_raw)
    except ValueError as e:
        raise LiteRRuleParseError(f"Unsupported FREQ {freq_raw!r}") from e

    interval = 1
    if "INTERVAL" in parts:
        interval = max(1, _parse_int("INTERVAL", parts.pop("INTERVAL")))

    count = None
    if "COUNT" in parts:
        count = _parse_int("COUNT", parts.pop("COUNT"))
        if count < 1:
            raise LiteRRuleParseError(f"COUNT must be positive, got {count}")

    until = None
    if "UNTIL" in parts:
        try:
            until = parse_until(parts.pop("UNTIL"))
        except LiteUnrepresentableDateError as e:
            raise LiteRRuleParseError(str(e)) from e

    byday = parts.pop("BYDAY", None)
    bymonthday = parts.pop("BYMONTHDAY", None)

    if parts:
        logger.debug("Ignoring unsupported RRULE keys: %s", ", ".join(sorted(parts)))

    if freq is Frequency.WEEKLY:
        return WeeklyRule(
            interval=interval,
            count=count,
            until=until,
            by_weekday=_parse_weekdays(byday or "", start),
        )

    if freq is Frequency.MONTHLY:
        month_day = start.day
        if bymonthday is not None:
            month_day = _parse_int("BYMONTHDAY", bymonthday)
            if not 1 <= month_day <= 31:
                raise LiteRRuleParseError(f"BYMONTHDAY must be within 1..31, got {month_day}")
        return MonthlyRule(interval=interval, count=count, until=until, by_month_day=month_day)

    return DailyRule(interval=interval, count=count, until=until)
