from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

import pytest

from eventcal_lite.config_loader import Config
from eventcal_lite.lite_models import Rule


@pytest.fixture
def test_timezone() -> str:
    """Return a deterministic timezone identifier for tests.

    Using a fixed timezone string avoids host-local timezone differences
    which can make datetime-sensitive tests flaky.
    """
    return "America/Los_Angeles"


@pytest.fixture
def local_tz(test_timezone: str) -> ZoneInfo:
    """ZoneInfo for the test timezone (observes daylight saving)."""
    return ZoneInfo(test_timezone)


@pytest.fixture
def utc_dt() -> Callable[..., datetime]:
    """Shorthand constructor for UTC datetimes: utc_dt(2024, 1, 1, 9)."""

    def _make(*args: int) -> datetime:
        return datetime(*args, tzinfo=UTC)

    return _make


@pytest.fixture
def make_rule() -> Callable[..., Rule]:
    """Build a Rule with a one-hour 2024-01-01 09:00 UTC base event by default."""

    def _make(
        rrule_text: str = "",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        exdates: Optional[list[datetime]] = None,
        rdates: Optional[list[datetime]] = None,
        is_all_day: bool = False,
        with_end: bool = True,
    ) -> Rule:
        start = start or datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        if end is None and with_end:
            end = start.replace(hour=start.hour + 1)
        return Rule(
            start=start,
            end=end,
            rrule_text=rrule_text,
            exdates=exdates or [],
            rdates=rdates or [],
            is_all_day=is_all_day,
        )

    return _make


@pytest.fixture
def lite_config(test_timezone: str) -> Config:
    """Config anchored to the test timezone with default limits."""
    return Config(timezone=test_timezone)


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Ensure eventcal environment variables do not leak between tests."""
    for name in ("EVENTCAL_DEBUG", "EVENTCAL_LOG_LEVEL", "EVENTCAL_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)
    yield
