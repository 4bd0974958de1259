"""
Commerce Core Time - Validity Windows
=====================================
Pure interval logic for price-book validity. All functions take explicit
datetimes - no hidden clock access.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.errors import InvalidInputError
from core.time.clock import require_aware

_NO_DURATION = timedelta(0)


# ══════════════════════════════════════════════════════════════
# VALIDITY WINDOW - closed interval, either side may be open
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ValidityWindow:
    """
    Closed interval [start, end]; a missing bound is unbounded on that side.

    Invariant: start <= end when both are present (enforced at construction).
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.start is not None:
            require_aware(self.start, "valid_from")
        if self.end is not None:
            require_aware(self.end, "valid_to")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidInputError(
                f"valid_from ({self.start.isoformat()}) must be <= "
                f"valid_to ({self.end.isoformat()}).",
                field_name="valid_to",
            )

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    @property
    def is_fully_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, at: datetime) -> bool:
        """Check if ``at`` falls within the window (inclusive)."""
        if self.start is not None and at < self.start:
            return False
        if self.end is not None and at > self.end:
            return False
        return True

    def specificity_key(self) -> tuple[int, timedelta]:
        """
        Sort key, smallest is most specific.

        Fully bounded windows rank first and are ordered by duration;
        half-open windows come next; the unbounded window is last.
        """
        if self.is_fully_bounded:
            return (0, self.end - self.start)
        if self.is_unbounded:
            return (2, _NO_DURATION)
        return (1, _NO_DURATION)

    def to_dict(self) -> dict:
        return {
            "valid_from": self.start.isoformat() if self.start else None,
            "valid_to": self.end.isoformat() if self.end else None,
        }


def parse_instant(value, field_name: str) -> Optional[datetime]:
    """ISO 8601 text (or a datetime) to datetime; blank means None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise InvalidInputError(
            f"{field_name} must be an ISO 8601 instant, got '{value}'.",
            field_name=field_name,
        ) from exc
