"""
Commerce Core Primitives - Shared Value Objects
===============================================
Pure Python, immutable, deterministic building blocks consumed by the
inventory and pricing engines.

Primitives:
    money   - integer minor-unit amounts with an explicit ISO 4217 currency
"""

from core.primitives.money import Money, normalize_currency

__all__ = [
    "Money",
    "normalize_currency",
]
