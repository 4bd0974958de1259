"""
Commerce Money Primitive - Exact Monetary Values
================================================
Engine: Core Primitives

RULES:
- Amounts are integer minor units (e.g. 1050 = 10.50 USD), never floats
- Currency is explicit on every value (ISO 4217 alphabetic code)
- Display formatting is the caller's concern

This file contains NO persistence logic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from core.errors import InvalidInputError

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


def normalize_currency(code) -> str:
    """
    Canonical ISO 4217 form of ``code``.

    Surrounding whitespace and lower case are tolerated; anything that is
    not three ASCII letters afterwards raises InvalidInputError.
    """
    if not isinstance(code, str):
        raise InvalidInputError(
            f"currency must be a string, got {type(code).__name__}.",
            field_name="currency",
        )
    candidate = code.strip().upper()
    if not _CURRENCY_CODE.match(candidate):
        raise InvalidInputError(
            f"currency must be a 3-letter ISO 4217 code, got '{code}'.",
            field_name="currency",
        )
    return candidate


# ══════════════════════════════════════════════════════════════
# MONEY VALUE OBJECT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Money:
    """
    Monetary value in integer minor units.

    Unit prices handed out by the pricing engine are Money, so the
    amount always travels together with its currency.
    """
    amount: int
    currency: str

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidInputError(
                f"Money amount must be int (minor units), "
                f"got {type(self.amount).__name__}.",
                field_name="amount",
            )
        object.__setattr__(self, "currency", normalize_currency(self.currency))

    def times(self, quantity: int) -> Money:
        """Extended amount for ``quantity`` units."""
        return Money(amount=self.amount * quantity, currency=self.currency)

    def to_dict(self) -> dict:
        return {"amount": self.amount, "currency": self.currency}
