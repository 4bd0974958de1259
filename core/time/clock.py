"""
Commerce Core Time - Injectable Clock
=====================================
Engines never call datetime.now() directly. The ledger stamps
reservation handles and the catalog defaults ``as_of`` through a Clock,
so tests can pin time with FixedClock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol

from core.errors import InvalidInputError


class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


class SystemClock:
    """Production clock - real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock - returns a fixed timestamp until advanced.

    Usage:
        clock = FixedClock(datetime(2024, 6, 1, tzinfo=timezone.utc))
        clock.advance(seconds=30)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        self._fixed_dt = require_aware(fixed_dt, "fixed_dt")

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)


def require_aware(value, field_name: str) -> datetime:
    """Reject naive datetimes; instants must be comparable across zones."""
    if not isinstance(value, datetime):
        raise InvalidInputError(
            f"{field_name} must be a datetime, got {type(value).__name__}.",
            field_name=field_name,
        )
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidInputError(
            f"{field_name} must be timezone-aware.",
            field_name=field_name,
        )
    return value
