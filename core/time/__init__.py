"""
Commerce Core Time - Public API
===============================
Explicit clock protocol and validity-window helpers.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    require_aware,
)
from core.time.temporal import ValidityWindow, parse_instant

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "require_aware",
    "ValidityWindow",
    "parse_instant",
]
