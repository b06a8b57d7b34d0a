"""Data models for recurrence expansion - eventcal_lite."""

from datetime import datetime, timedelta, tzinfo
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_serializer, field_validator

from .lite_datetime_utils import canonical_key, normalize_instant, to_timezone
from .lite_rrule_parser import sanitize_rrule

ONE_DAY = timedelta(days=1)


class Rule(BaseModel):
    """Recurrence inputs of one event, anchored to the timezone of ``start``.

    ``end``, ``exdates`` and ``rdates`` are converted into the timezone of
    ``start`` on construction; naive values are taken as local to it.
    """

    start: datetime = Field(..., description="Timezone-aware start of the base event")
    end: Optional[datetime] = Field(default=None, description="End of the base event")
    rrule_text: str = Field(default="", description="RRULE text; empty means non-recurring")
    exdates: list[datetime] = Field(default_factory=list, description="Instants to exclude")
    rdates: list[datetime] = Field(default_factory=list, description="Instants to force-include")
    is_all_day: bool = Field(default=False, description="All-day event flag")

    model_config = ConfigDict(frozen=True)

    @field_validator("start")
    @classmethod
    def _require_aware_start(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("start must be timezone-aware")
        return value

    @field_validator("rrule_text", mode="before")
    @classmethod
    def _strip_rrule_prefix(cls, value: Optional[str]) -> str:
        return sanitize_rrule(value)

    @field_validator("end")
    @classmethod
    def _align_end(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        start = info.data.get("start")
        if value is None or start is None:
            return value
        return to_timezone(value, start.tzinfo)

    @field_validator("exdates", "rdates")
    @classmethod
    def _align_dates(cls, values: list[datetime], info: ValidationInfo) -> list[datetime]:
        start = info.data.get("start")
        if start is None:
            return values
        return [to_timezone(value, start.tzinfo) for value in values]

    @property
    def timezone(self) -> tzinfo:
        """Timezone every comparison for this rule happens in."""
        return self.start.tzinfo  # type: ignore[return-value]

    @property
    def duration(self) -> Optional[timedelta]:
        """Occurrence length: ``end - start``, one day for all-day events, else None.

        A non-positive ``end - start`` counts as no duration.
        """
        if self.end is None:
            return ONE_DAY if self.is_all_day else None

        delta = self.end - self.start
        if delta <= timedelta(0):
            return None
        return delta

    @property
    def has_rrule(self) -> bool:
        """Check if the rule carries recurrence text."""
        return self.rrule_text != ""


class Occurrence(BaseModel):
    """One concrete instance produced by expanding a Rule over a window."""

    start: datetime = Field(..., description="Occurrence start")
    end: Optional[datetime] = Field(default=None, description="Occurrence end, if known")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def at(cls, start: datetime, duration: Optional[timedelta]) -> "Occurrence":
        """Build an occurrence starting at ``start`` lasting ``duration``.

        ``start`` is normalized first, so a wall time inside a spring-forward
        gap becomes the real instant it denotes.
        """
        start = normalize_instant(start)
        return cls(start=start, end=start + duration if duration is not None else None)

    @property
    def canonical_key(self) -> str:
        """Identity used for merge and exclusion; the end does not participate."""
        return canonical_key(self.start)

    @field_serializer("start")
    def serialize_start(self, dt: datetime) -> str:
        """Serialize start to ISO format."""
        return dt.isoformat()

    @field_serializer("end", when_used="unless-none")
    def serialize_end(self, dt: datetime) -> str:
        """Serialize end to ISO format."""
        return dt.isoformat()
