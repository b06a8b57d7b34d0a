"""Unit tests for eventcal_lite datetime helpers."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from eventcal_lite.lite_datetime_utils import (
    as_utc,
    canonical_key,
    ensure_timezone_aware,
    first_weekday_on_or_after,
    format_storage,
    normalize_instant,
    parse_datetime_value,
    parse_until,
    to_timezone,
)
from eventcal_lite.lite_exceptions import LiteUnrepresentableDateError

pytestmark = pytest.mark.unit


class TestTimezoneHelpers:
    def test_ensure_timezone_aware_defaults_to_utc(self):
        assert ensure_timezone_aware(datetime(2024, 1, 1)).tzinfo is UTC

    def test_ensure_timezone_aware_keeps_aware_input(self, local_tz):
        dt = datetime(2024, 1, 1, tzinfo=local_tz)

        assert ensure_timezone_aware(dt, UTC) is dt

    def test_to_timezone_treats_naive_as_local(self, local_tz):
        result = to_timezone(datetime(2024, 1, 1, 9, 0), local_tz)

        assert result.hour == 9
        assert result.utcoffset() == timedelta(hours=-8)

    def test_to_timezone_converts_aware(self, local_tz):
        result = to_timezone(datetime(2024, 1, 1, 17, 0, tzinfo=UTC), local_tz)

        assert result.hour == 9


class TestInstantHelpers:
    def test_as_utc_converts_aware(self, local_tz):
        result = as_utc(datetime(2024, 1, 1, 9, 0, tzinfo=local_tz))

        assert result == datetime(2024, 1, 1, 17, 0, tzinfo=UTC)
        assert result.tzinfo is UTC

    def test_as_utc_orders_fall_back_hour(self):
        tz = ZoneInfo("America/New_York")
        first = datetime(2024, 11, 3, 1, 45, tzinfo=tz)
        second = datetime(2024, 11, 3, 1, 15, fold=1, tzinfo=tz)

        assert as_utc(first) < as_utc(second)

    def test_normalize_instant_resolves_spring_forward_gap(self, local_tz):
        # 02:30 does not exist in Los Angeles on 2024-03-10
        result = normalize_instant(datetime(2024, 3, 10, 2, 30, tzinfo=local_tz))

        assert (result.hour, result.minute) == (3, 30)
        assert result.utcoffset() == timedelta(hours=-7)

    def test_normalize_instant_keeps_regular_times(self, local_tz):
        dt = datetime(2024, 3, 11, 9, 0, tzinfo=local_tz)

        assert normalize_instant(dt) == dt
        assert normalize_instant(dt).hour == 9

    def test_normalize_instant_into_other_zone(self, local_tz):
        result = normalize_instant(datetime(2024, 1, 1, 17, 0, tzinfo=UTC), local_tz)

        assert result.hour == 9


class TestCanonicalKey:
    def test_key_in_own_timezone(self):
        assert canonical_key(datetime(2024, 1, 1, 9, 0, tzinfo=UTC)) == "2024-01-01T09:00:00+00:00"

    def test_same_instant_same_key_after_conversion(self, local_tz):
        utc = datetime(2024, 1, 1, 17, 0, tzinfo=UTC)
        local = datetime(2024, 1, 1, 9, 0, tzinfo=local_tz)

        assert canonical_key(utc, local_tz) == canonical_key(local)

    def test_gap_time_shares_key_with_real_instant(self, local_tz):
        gap = datetime(2024, 3, 10, 2, 30, tzinfo=local_tz)

        assert canonical_key(gap) == canonical_key(datetime(2024, 3, 10, 10, 30, tzinfo=UTC), local_tz)
        assert canonical_key(gap) == "2024-03-10T03:30:00-07:00"

    def test_dst_fold_instants_are_distinct(self):
        tz = ZoneInfo("America/New_York")
        first = datetime(2024, 11, 3, 1, 30, tzinfo=tz)
        second = datetime(2024, 11, 3, 1, 30, fold=1, tzinfo=tz)

        assert canonical_key(first) == "2024-11-03T01:30:00-04:00"
        assert canonical_key(second) == "2024-11-03T01:30:00-05:00"


class TestParseDatetimeValue:
    @pytest.mark.parametrize(
        ("value", "expected_hour"),
        [
            ("2024-01-01 09:00:00", 9),
            ("2024-01-01T09:00:00", 9),
            ("2024-01-01T17:00:00+00:00", 9),
            ("2024-01-01T17:00:00Z", 9),
            ("2024-01-01", 0),
        ],
    )
    def test_string_formats(self, value, expected_hour, local_tz):
        result = parse_datetime_value(value, local_tz)

        assert result.date() == date(2024, 1, 1)
        assert result.hour == expected_hour
        assert result.utcoffset() == timedelta(hours=-8)

    def test_date_object_is_midnight(self, local_tz):
        result = parse_datetime_value(date(2024, 1, 1), local_tz)

        assert (result.hour, result.minute) == (0, 0)
        assert result.utcoffset() == timedelta(hours=-8)

    def test_datetime_object_is_converted(self, local_tz):
        result = parse_datetime_value(datetime(2024, 1, 1, 17, 0, tzinfo=UTC), local_tz)

        assert result.hour == 9

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2024-13-45"])
    def test_invalid_values_return_none(self, value, local_tz):
        assert parse_datetime_value(value, local_tz) is None


class TestParseUntil:
    def test_valid_until(self):
        assert parse_until("20240131T120000Z") == datetime(2024, 1, 31, 12, 0, tzinfo=UTC)

    def test_lower_case_is_accepted(self):
        assert parse_until("20240131t120000z") == datetime(2024, 1, 31, 12, 0, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["2024-01-31", "20240231T000000Z", "", "20240131T120000"])
    def test_invalid_until_raises(self, value):
        with pytest.raises(LiteUnrepresentableDateError):
            parse_until(value)


class TestCalendarHelpers:
    def test_format_storage(self, local_tz):
        dt = datetime(2024, 1, 1, 17, 30, tzinfo=UTC)

        assert format_storage(dt, local_tz) == "2024-01-01 09:30:00"

    @pytest.mark.parametrize(
        ("weekday", "expected_day"),
        [(2, 3), (0, 8), (6, 7)],
    )
    def test_first_weekday_on_or_after(self, weekday, expected_day):
        # 2024-01-03 is a Wednesday
        start = datetime(2024, 1, 3, 9, 0, tzinfo=UTC)

        result = first_weekday_on_or_after(start, weekday)

        assert result == datetime(2024, 1, expected_day, 9, 0, tzinfo=UTC)
