"""Exception hierarchy for eventcal_lite.

Expansion itself never lets these escape to the caller: grammar problems and
unrepresentable dates are recovered inside the engine. Query validation errors
belong to the calling layer and carry the client-facing error code.
"""

from __future__ import annotations


class LiteRecurrenceError(Exception):
    """Base exception for all eventcal_lite errors."""


class LiteRRuleParseError(LiteRecurrenceError):
    """Recurrence rule text could not be parsed.

    Raised when:
    - FREQ is missing or not one of DAILY, WEEKLY, MONTHLY
    - INTERVAL, COUNT or BYMONTHDAY are not integers or out of range
    - UNTIL is not a valid ``YYYYMMDDTHHMMSSZ`` timestamp
    - A segment is not a ``KEY=VALUE`` pair

    The engine recovers by treating the event as non-recurring.
    """


class LiteUnrepresentableDateError(LiteRecurrenceError):
    """A calendar date cannot be formed, e.g. day 31 of February.

    The engine skips the affected candidate and keeps generating.
    """


class LiteQueryValidationError(LiteRecurrenceError):
    """Query parameters were rejected before expansion.

    Should result in HTTP 400 Bad Request response.
    """

    def __init__(self, code: str, message: str, status: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status

    def to_dict(self) -> dict[str, object]:
        """Return the error as a JSON-ready mapping."""
        return {"code": self.code, "message": self.message, "data": {"status": self.status}}
