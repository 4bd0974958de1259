"""
Commerce Pricing Engine - Price Book Records
============================================
A price book is a named, currency-scoped set of per-product unit prices,
optionally scoped to a customer group and a validity window.

RULES:
- Amounts are integer minor units of the book's currency
- One base amount per product per book; quantity breaks are optional
  extra tiers on top of the base amount
- Records are immutable; editing a book replaces the record
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from core.errors import (
    InvalidInputError,
    require_identifier,
    require_non_negative_int,
    require_positive_int,
)
from core.primitives.money import Money, normalize_currency
from core.time.temporal import ValidityWindow, parse_instant

PRICE_BOOK_ACTIVE = "ACTIVE"
PRICE_BOOK_INACTIVE = "INACTIVE"
VALID_PRICE_BOOK_STATUSES = frozenset({PRICE_BOOK_ACTIVE, PRICE_BOOK_INACTIVE})


@dataclass(frozen=True)
class PriceTier:
    """Unit amount that applies from ``min_quantity`` units upwards."""
    min_quantity: int
    amount: int

    def __post_init__(self):
        require_positive_int(self.min_quantity, "min_quantity")
        require_non_negative_int(self.amount, "amount")

    def to_dict(self) -> dict:
        return {"min_quantity": self.min_quantity, "amount": self.amount}


def _tier_from_mapping(data) -> PriceTier:
    if not isinstance(data, Mapping):
        raise InvalidInputError(
            "quantity break tiers must be mappings.", field_name="quantity_breaks"
        )
    return PriceTier(min_quantity=data["min_quantity"], amount=data["amount"])


def _normalize_prices(prices) -> Mapping[str, int]:
    if not isinstance(prices, Mapping):
        raise InvalidInputError("prices must be a mapping.", field_name="prices")
    normalized = {}
    for product_id, amount in prices.items():
        product_id = require_identifier(product_id, "product_id")
        if product_id in normalized:
            raise InvalidInputError(
                f"Duplicate price entry for product '{product_id}'.",
                field_name="prices",
            )
        normalized[product_id] = require_non_negative_int(amount, "amount")
    return MappingProxyType(dict(sorted(normalized.items())))


def _normalize_breaks(breaks, prices: Mapping[str, int]) -> Mapping[str, Tuple[PriceTier, ...]]:
    if not isinstance(breaks, Mapping):
        raise InvalidInputError(
            "quantity_breaks must be a mapping.", field_name="quantity_breaks"
        )
    normalized = {}
    for product_id, tiers in breaks.items():
        product_id = require_identifier(product_id, "product_id")
        if product_id not in prices:
            raise InvalidInputError(
                f"Quantity breaks for unpriced product '{product_id}'.",
                field_name="quantity_breaks",
            )
        if not isinstance(tiers, (list, tuple)):
            raise InvalidInputError(
                f"Quantity breaks for product '{product_id}' must be a list of tiers.",
                field_name="quantity_breaks",
            )
        ordered = tuple(sorted(
            (t if isinstance(t, PriceTier) else _tier_from_mapping(t) for t in tiers),
            key=lambda t: t.min_quantity,
        ))
        thresholds = [t.min_quantity for t in ordered]
        if len(set(thresholds)) != len(thresholds):
            raise InvalidInputError(
                f"Duplicate quantity threshold for product '{product_id}'.",
                field_name="quantity_breaks",
            )
        if ordered:
            normalized[product_id] = ordered
    return MappingProxyType(dict(sorted(normalized.items())))


# ══════════════════════════════════════════════════════════════
# PRICE BOOK
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PriceBook:
    """
    Fields:
        price_book_id:      Unique identifier
        currency:           ISO 4217 code, every amount is in it
        prices:             product_id -> base unit amount (minor units)
        is_default:         Default book for its currency
        customer_group_id:  None means the book applies to every group
        valid_from/to:      Inclusive bounds, None means unbounded
        quantity_breaks:    product_id -> tiers ordered by min_quantity
        status:             ACTIVE | INACTIVE (inactive books never resolve)
    """
    price_book_id: str
    name: str
    currency: str
    prices: Mapping[str, int] = field(default_factory=dict)
    is_default: bool = False
    customer_group_id: Optional[str] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    quantity_breaks: Mapping[str, Tuple[PriceTier, ...]] = field(default_factory=dict)
    status: str = PRICE_BOOK_ACTIVE

    def __post_init__(self):
        object.__setattr__(
            self, "price_book_id", require_identifier(self.price_book_id, "price_book_id")
        )
        object.__setattr__(self, "name", require_identifier(self.name, "name"))
        object.__setattr__(self, "currency", normalize_currency(self.currency))
        if not isinstance(self.is_default, bool):
            raise InvalidInputError("is_default must be a bool.", field_name="is_default")

        group = self.customer_group_id
        if group is not None:
            group = group.strip() if isinstance(group, str) else group
            group = require_identifier(group, "customer_group_id") if group else None
        object.__setattr__(self, "customer_group_id", group)

        # Validates bounds (aware, ordered).
        ValidityWindow(self.valid_from, self.valid_to)

        if not isinstance(self.status, str) or self.status not in VALID_PRICE_BOOK_STATUSES:
            raise InvalidInputError(
                f"status '{self.status}' not valid.", field_name="status"
            )

        prices = _normalize_prices(self.prices)
        object.__setattr__(self, "prices", prices)
        object.__setattr__(
            self, "quantity_breaks", _normalize_breaks(self.quantity_breaks, prices)
        )

    @property
    def window(self) -> ValidityWindow:
        return ValidityWindow(self.valid_from, self.valid_to)

    @property
    def is_active(self) -> bool:
        return self.status == PRICE_BOOK_ACTIVE

    @property
    def is_active_default(self) -> bool:
        return self.is_default and self.is_active

    @property
    def is_group_agnostic(self) -> bool:
        return self.customer_group_id is None

    @property
    def is_standing_default(self) -> bool:
        """Default, for every group, forever: at most one per currency."""
        return self.is_default and self.is_group_agnostic and self.window.is_unbounded

    def unit_amount_for(self, product_id: str, quantity: int = 1) -> Tuple[int, Optional[PriceTier]]:
        """Base amount, or the deepest quantity tier that ``quantity`` reaches."""
        amount = self.prices[product_id]
        applied = None
        for tier in self.quantity_breaks.get(product_id, ()):
            if tier.min_quantity <= quantity:
                applied = tier
        if applied is not None:
            amount = applied.amount
        return amount, applied

    def to_dict(self) -> dict:
        return {
            "price_book_id": self.price_book_id,
            "name": self.name,
            "currency": self.currency,
            "is_default": self.is_default,
            "customer_group_id": self.customer_group_id,
            **self.window.to_dict(),
            "prices": dict(self.prices),
            "quantity_breaks": {
                product_id: [t.to_dict() for t in tiers]
                for product_id, tiers in self.quantity_breaks.items()
            },
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PriceBook:
        return cls(
            price_book_id=data["price_book_id"],
            name=data["name"],
            currency=data["currency"],
            prices=data.get("prices", {}),
            is_default=data.get("is_default", False),
            customer_group_id=data.get("customer_group_id"),
            valid_from=parse_instant(data.get("valid_from"), "valid_from"),
            valid_to=parse_instant(data.get("valid_to"), "valid_to"),
            quantity_breaks=data.get("quantity_breaks", {}),
            status=data.get("status", PRICE_BOOK_ACTIVE),
        )


# ══════════════════════════════════════════════════════════════
# RESOLUTION RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ResolvedPrice:
    product_id: str
    price_book_id: str
    unit_price: Money
    quantity: int = 1
    tier: Optional[PriceTier] = None
    customer_group_id: Optional[str] = None

    @property
    def amount(self) -> int:
        return self.unit_price.amount

    @property
    def currency(self) -> str:
        return self.unit_price.currency

    @property
    def extended_price(self) -> Money:
        """Unit price times the requested quantity."""
        return self.unit_price.times(self.quantity)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "price_book_id": self.price_book_id,
            "unit_price": self.unit_price.to_dict(),
            "quantity": self.quantity,
            "extended_price": self.extended_price.to_dict(),
            "tier": self.tier.to_dict() if self.tier else None,
            "customer_group_id": self.customer_group_id,
        }
