"""
Commerce Pricing Engine - Errors
================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from core.errors import CommerceError


class PricingError(CommerceError):
    """Base error for price resolution and price-book administration."""

    code = "PRICING_ERROR"


class NoPriceFoundError(PricingError):
    """No applicable price book prices the product."""

    code = "NO_PRICE_FOUND"

    def __init__(
        self,
        product_id: str,
        currency: str,
        customer_group_id: Optional[str],
        as_of: datetime,
    ):
        self.product_id = product_id
        self.currency = currency
        self.customer_group_id = customer_group_id
        self.as_of = as_of
        group = customer_group_id or "<any>"
        super().__init__(
            f"No price for product '{product_id}' in {currency} "
            f"(customer group {group}) as of {as_of.isoformat()}."
        )

    def details(self) -> dict:
        return {
            "product_id": self.product_id,
            "currency": self.currency,
            "customer_group_id": self.customer_group_id,
            "as_of": self.as_of.isoformat(),
        }


class AmbiguousPriceBooksError(PricingError):
    """
    Several books tie after every tie-break. This is a data-integrity
    defect in the price-book set and is never resolved by picking one.
    """

    code = "AMBIGUOUS_PRICE_BOOKS"

    def __init__(self, product_id: str, currency: str, price_book_ids: Sequence[str]):
        self.product_id = product_id
        self.currency = currency
        self.price_book_ids = tuple(sorted(price_book_ids))
        super().__init__(
            f"Ambiguous price for product '{product_id}' in {currency}: "
            f"price books {', '.join(self.price_book_ids)} tie."
        )

    def details(self) -> dict:
        return {
            "product_id": self.product_id,
            "currency": self.currency,
            "price_book_ids": list(self.price_book_ids),
        }


class UnknownPriceBookError(PricingError):
    code = "UNKNOWN_PRICE_BOOK"

    def __init__(self, price_book_id: str):
        self.price_book_id = price_book_id
        super().__init__(f"Price book '{price_book_id}' does not exist.")

    def details(self) -> dict:
        return {"price_book_id": self.price_book_id}


class DefaultPriceBookConflictError(PricingError):
    """A second standing default (no group, unbounded) for one currency."""

    code = "DEFAULT_PRICE_BOOK_CONFLICT"

    def __init__(self, currency: str, existing_ids: Sequence[str]):
        self.currency = currency
        self.existing_ids = tuple(sorted(existing_ids))
        super().__init__(
            f"Currency {currency} already has a standing default price book "
            f"({', '.join(self.existing_ids)}). Promote instead of adding another."
        )

    def details(self) -> dict:
        return {"currency": self.currency, "existing_ids": list(self.existing_ids)}


class DefaultPriceBookRequiredError(PricingError):
    """Deleting the only default of a currency; replace it first."""

    code = "DEFAULT_PRICE_BOOK_REQUIRED"

    def __init__(self, price_book_id: str, currency: str):
        self.price_book_id = price_book_id
        self.currency = currency
        super().__init__(
            f"Price book '{price_book_id}' is the only default for {currency} "
            f"and cannot be deleted until another default replaces it."
        )

    def details(self) -> dict:
        return {"price_book_id": self.price_book_id, "currency": self.currency}
