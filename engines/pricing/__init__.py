"""
Commerce Pricing Engine - Public API
====================================
"""

from engines.pricing.catalog import PriceBookCatalog
from engines.pricing.errors import (
    AmbiguousPriceBooksError,
    DefaultPriceBookConflictError,
    DefaultPriceBookRequiredError,
    NoPriceFoundError,
    PricingError,
    UnknownPriceBookError,
)
from engines.pricing.models import (
    PRICE_BOOK_ACTIVE,
    PRICE_BOOK_INACTIVE,
    PriceBook,
    PriceTier,
    ResolvedPrice,
)
from engines.pricing.resolver import rank_candidates, resolve_price

__all__ = [
    "PriceBookCatalog",
    "PriceBook",
    "PriceTier",
    "ResolvedPrice",
    "PRICE_BOOK_ACTIVE",
    "PRICE_BOOK_INACTIVE",
    "rank_candidates",
    "resolve_price",
    "PricingError",
    "NoPriceFoundError",
    "AmbiguousPriceBooksError",
    "UnknownPriceBookError",
    "DefaultPriceBookConflictError",
    "DefaultPriceBookRequiredError",
]
