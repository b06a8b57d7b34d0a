"""RRULE expansion logic for eventcal_lite."""

import heapq
import logging
from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta
from itertools import islice
from typing import Optional

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, rrule

from .lite_datetime_utils import as_utc, canonical_key, first_weekday_on_or_after, to_timezone
from .lite_exceptions import LiteRecurrenceError
from .lite_models import Occurrence, Rule
from .lite_rrule_parser import DailyRule, MonthlyRule, StructuredRule, WeeklyRule, parse_rrule

logger = logging.getLogger(__name__)


class RecurrenceEngine:
    """Expands a Rule into the concrete occurrences inside a query window.

    The engine keeps no state between calls: the rule text is parsed again on
    every ``expand`` and nothing is cached, so one instance can be shared
    freely across threads.
    """

    def expand(self, rule: Rule, range_start: datetime, range_end: datetime) -> list[Occurrence]:
        """Expand ``rule`` over the closed window ``[range_start, range_end]``.

        Args:
            rule: Event recurrence inputs
            range_start: Window start (naive values are taken as local to the rule)
            range_end: Window end, inclusive

        Returns:
            Occurrences ordered ascending by start; empty when the window is inverted
        """
        tz = rule.timezone
        window_start = to_timezone(range_start, tz)
        window_end = to_timezone(range_end, tz)

        if as_utc(window_end) < as_utc(window_start):
            return []

        duration = rule.duration
        occurrences: dict[str, Occurrence] = {}
        recurring = rule.has_rrule

        if recurring:
            try:
                for candidate in self.iter_candidates(rule, window_start, window_end):
                    occurrence = Occurrence.at(candidate, duration)
                    occurrences.setdefault(occurrence.canonical_key, occurrence)
            except (LiteRecurrenceError, ValueError, OverflowError) as e:
                logger.warning(
                    "Recurrence rule %r could not be expanded for window %s..%s: %s; "
                    "treating event as non-recurring",
                    rule.rrule_text,
                    window_start.isoformat(),
                    window_end.isoformat(),
                    e,
                )
                occurrences.clear()
                recurring = False

        if not recurring and _within(rule.start, window_start, window_end):
            base = Occurrence.at(rule.start, duration)
            occurrences[base.canonical_key] = base

        self._merge_rdates(occurrences, rule.rdates, window_start, window_end, duration)

        excluded = {canonical_key(exdate, tz) for exdate in rule.exdates}
        result = [occ for key, occ in occurrences.items() if key not in excluded]
        result.sort(key=lambda occ: as_utc(occ.start))

        logger.debug(
            "Expanded rule %r over %s..%s into %d occurrences (%d excluded)",
            rule.rrule_text,
            window_start.isoformat(),
            window_end.isoformat(),
            len(result),
            len(occurrences) - len(result),
        )
        return result

    def iter_candidates(
        self, rule: Rule, window_start: datetime, window_end: datetime
    ) -> Iterator[datetime]:
        """Yield rule-generated starts inside the window, in ascending order.

        COUNT and UNTIL are measured from the series start, so a series that
        ended before the window yields nothing even if the window is wide.

        Raises:
            LiteRRuleParseError: If the rule text is malformed
        """
        structured = parse_rrule(rule.rrule_text, rule.start)
        until = structured.until
        start_utc = as_utc(window_start)
        end_utc = as_utc(window_end)

        series: Iterable[datetime] = self._iter_series(structured, rule.start)
        count = structured.effective_count
        if count is not None:
            series = islice(series, count)

        for candidate in series:
            instant = as_utc(candidate)
            if until is not None and instant > until:
                break
            if instant > end_utc:
                break
            if instant < start_utc:
                continue
            yield candidate

    def _iter_series(self, structured: StructuredRule, start: datetime) -> Iterator[datetime]:
        if isinstance(structured, WeeklyRule):
            return self._iter_weekly(structured, start)
        if isinstance(structured, MonthlyRule):
            return iter(
                rrule(
                    MONTHLY,
                    interval=structured.interval,
                    bymonthday=structured.by_month_day,
                    dtstart=start,
                )
            )
        if isinstance(structured, DailyRule):
            return iter(rrule(DAILY, interval=structured.interval, dtstart=start))
        raise LiteRecurrenceError(f"Unsupported rule type {type(structured).__name__}")

    def _iter_weekly(self, structured: WeeklyRule, start: datetime) -> Iterator[datetime]:
        # One stream per weekday, each anchored on its first date on/after start.
        streams = [
            iter(
                rrule(
                    WEEKLY,
                    interval=structured.interval,
                    dtstart=first_weekday_on_or_after(start, weekday),
                )
            )
            for weekday in sorted(structured.by_weekday)
        ]
        return heapq.merge(*streams, key=as_utc)

    def _merge_rdates(
        self,
        occurrences: dict[str, Occurrence],
        rdates: list[datetime],
        window_start: datetime,
        window_end: datetime,
        duration: Optional[timedelta],
    ) -> None:
        for rdate in rdates:
            if _within(rdate, window_start, window_end):
                addition = Occurrence.at(rdate, duration)
                occurrences.setdefault(addition.canonical_key, addition)


def _within(dt: datetime, window_start: datetime, window_end: datetime) -> bool:
    return as_utc(window_start) <= as_utc(dt) <= as_utc(window_end)


_default_engine = RecurrenceEngine()


def expand(rule: Rule, range_start: datetime, range_end: datetime) -> list[Occurrence]:
    """Expand ``rule`` over ``[range_start, range_end]`` using the shared engine."""
    return _default_engine.expand(rule, range_start, range_end)
