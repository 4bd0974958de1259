"""
Commerce Price Resolution Tests
===============================
Pure resolution over a set of PriceBook records: filtering, the
three-step ranking, ambiguity and quantity breaks.
"""

import random
from datetime import datetime, timezone

import pytest

from core.errors import InvalidInputError
from core.primitives import Money
from engines.pricing import (
    PRICE_BOOK_INACTIVE,
    AmbiguousPriceBooksError,
    NoPriceFoundError,
    PriceBook,
    PriceTier,
    rank_candidates,
    resolve_price,
)

JUNE_1 = datetime(2024, 6, 1, tzinfo=timezone.utc)
YEAR_START = datetime(2024, 1, 1, tzinfo=timezone.utc)
YEAR_END = datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


def _book(price_book_id, amount=1000, **kwargs):
    kwargs.setdefault("currency", "USD")
    kwargs.setdefault("prices", {"P1": amount})
    return PriceBook(price_book_id=price_book_id, name=price_book_id, **kwargs)


PB1 = _book("PB1", 1000, is_default=True)
PB2 = _book(
    "PB2", 800,
    customer_group_id="wholesale",
    valid_from=YEAR_START,
    valid_to=YEAR_END,
)


# ══════════════════════════════════════════════════════════════
# REFERENCE SCENARIO
# ══════════════════════════════════════════════════════════════

class TestReferenceScenario:
    def test_wholesale_gets_group_book(self):
        price = resolve_price([PB1, PB2], "P1", "USD", "wholesale", as_of=JUNE_1)
        assert price.price_book_id == "PB2"
        assert price.unit_price == Money(800, "USD")

    def test_retail_falls_back_to_default(self):
        price = resolve_price([PB1, PB2], "P1", "USD", "retail", as_of=JUNE_1)
        assert price.price_book_id == "PB1"
        assert price.amount == 1000

    def test_other_currency_has_no_price(self):
        with pytest.raises(NoPriceFoundError) as exc_info:
            resolve_price([PB1, PB2], "P1", "EUR", "wholesale", as_of=JUNE_1)
        assert exc_info.value.code == "NO_PRICE_FOUND"
        assert exc_info.value.details()["currency"] == "EUR"

    def test_group_book_outside_window_falls_back(self):
        later = datetime(2025, 2, 1, tzinfo=timezone.utc)
        price = resolve_price([PB1, PB2], "P1", "USD", "wholesale", as_of=later)
        assert price.price_book_id == "PB1"

    def test_window_end_is_inclusive(self):
        price = resolve_price([PB1, PB2], "P1", "USD", "wholesale", as_of=YEAR_END)
        assert price.price_book_id == "PB2"

    def test_lower_case_currency_accepted(self):
        assert resolve_price([PB1], "P1", "usd", as_of=JUNE_1).currency == "USD"


# ══════════════════════════════════════════════════════════════
# RANKING
# ══════════════════════════════════════════════════════════════

class TestRanking:
    def test_group_beats_narrower_agnostic_window(self):
        promo = _book("PROMO", 500, valid_from=JUNE_1, valid_to=JUNE_1)
        group = _book("GROUP", 900, customer_group_id="vip")
        price = resolve_price([promo, group], "P1", "USD", "vip", as_of=JUNE_1)
        assert price.price_book_id == "GROUP"

    def test_bounded_beats_half_open_beats_unbounded(self):
        bounded = _book("B", 1, valid_from=YEAR_START, valid_to=YEAR_END)
        half_open = _book("H", 2, valid_from=YEAR_START)
        unbounded = _book("U", 3)
        assert resolve_price([bounded, half_open, unbounded], "P1", "USD", as_of=JUNE_1).price_book_id == "B"
        assert resolve_price([half_open, unbounded], "P1", "USD", as_of=JUNE_1).price_book_id == "H"

    def test_narrower_bounded_window_wins(self):
        year = _book("YEAR", 1, valid_from=YEAR_START, valid_to=YEAR_END)
        june = _book(
            "JUNE", 2,
            valid_from=JUNE_1,
            valid_to=datetime(2024, 6, 30, tzinfo=timezone.utc),
        )
        assert resolve_price([year, june], "P1", "USD", as_of=JUNE_1).price_book_id == "JUNE"

    def test_default_breaks_agnostic_tie(self):
        other = _book("OTHER", 1234)
        price = resolve_price([other, PB1], "P1", "USD", as_of=JUNE_1)
        assert price.price_book_id == "PB1"

    def test_default_does_not_break_group_tie(self):
        a = _book("GA", 1, customer_group_id="vip", is_default=True)
        b = _book("GB", 2, customer_group_id="vip")
        with pytest.raises(AmbiguousPriceBooksError) as exc_info:
            resolve_price([a, b], "P1", "USD", "vip", as_of=JUNE_1)
        assert exc_info.value.price_book_ids == ("GA", "GB")

    def test_unresolved_tie_is_ambiguous(self):
        a = _book("A", 1)
        b = _book("B", 2)
        with pytest.raises(AmbiguousPriceBooksError) as exc_info:
            resolve_price([b, a], "P1", "USD", as_of=JUNE_1)
        assert exc_info.value.details()["price_book_ids"] == ["A", "B"]

    def test_group_book_invisible_without_group(self):
        with pytest.raises(NoPriceFoundError):
            resolve_price([PB2], "P1", "USD", as_of=JUNE_1)

    def test_unpriced_product_skips_book(self):
        other_product = _book("X", prices={"P2": 5}, customer_group_id="wholesale")
        price = resolve_price([PB1, other_product], "P1", "USD", "wholesale", as_of=JUNE_1)
        assert price.price_book_id == "PB1"

    def test_inactive_book_ignored(self):
        retired = _book("OLD", 1, customer_group_id="wholesale", status=PRICE_BOOK_INACTIVE)
        price = resolve_price([PB1, retired], "P1", "USD", "wholesale", as_of=JUNE_1)
        assert price.price_book_id == "PB1"

    def test_rank_candidates_empty(self):
        assert rank_candidates([PB2], "P1", "USD", None, JUNE_1) == []


# ══════════════════════════════════════════════════════════════
# PURITY AND VALIDATION
# ══════════════════════════════════════════════════════════════

class TestPurity:
    def test_order_of_books_never_matters(self):
        books = [
            PB1,
            PB2,
            _book("Q2", 700, valid_from=datetime(2024, 4, 1, tzinfo=timezone.utc),
                  valid_to=datetime(2024, 6, 30, tzinfo=timezone.utc)),
            _book("LATE", 600, valid_from=YEAR_START),
        ]
        expected = resolve_price(books, "P1", "USD", "retail", as_of=JUNE_1)
        rng = random.Random(7)
        for _ in range(20):
            shuffled = books[:]
            rng.shuffle(shuffled)
            assert resolve_price(shuffled, "P1", "USD", "retail", as_of=JUNE_1) == expected
        assert expected.price_book_id == "Q2"

    def test_naive_instant_rejected(self):
        with pytest.raises(InvalidInputError):
            resolve_price([PB1], "P1", "USD", as_of=datetime(2024, 6, 1))

    def test_malformed_currency_rejected(self):
        with pytest.raises(InvalidInputError):
            resolve_price([PB1], "P1", "DOLLARS", as_of=JUNE_1)

    def test_empty_group_means_no_group(self):
        price = resolve_price([PB1, PB2], "P1", "USD", "  ", as_of=JUNE_1)
        assert price.price_book_id == "PB1"

    def test_non_string_group_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            resolve_price([PB1], "P1", "USD", 42, as_of=JUNE_1)
        assert exc_info.value.field_name == "customer_group_id"


# ══════════════════════════════════════════════════════════════
# QUANTITY BREAKS
# ══════════════════════════════════════════════════════════════

class TestQuantityBreaks:
    BULK = _book(
        "BULK", 1000,
        quantity_breaks={"P1": [{"min_quantity": 10, "amount": 900},
                                {"min_quantity": 50, "amount": 750}]},
    )

    def test_base_amount_below_first_tier(self):
        price = resolve_price([self.BULK], "P1", "USD", as_of=JUNE_1, quantity=9)
        assert price.amount == 1000
        assert price.tier is None

    def test_deepest_reached_tier_applies(self):
        assert resolve_price([self.BULK], "P1", "USD", as_of=JUNE_1, quantity=10).amount == 900
        price = resolve_price([self.BULK], "P1", "USD", as_of=JUNE_1, quantity=75)
        assert price.amount == 750
        assert price.tier == PriceTier(50, 750)

    def test_extended_price_uses_tier_amount(self):
        price = resolve_price([self.BULK], "P1", "USD", as_of=JUNE_1, quantity=12)
        assert price.extended_price == Money(10800, "USD")
        assert price.to_dict()["extended_price"] == {"amount": 10800, "currency": "USD"}

    def test_non_list_tiers_rejected(self):
        with pytest.raises(InvalidInputError, match="list of tiers"):
            _book("BAD", quantity_breaks={"P1": 5})

    def test_quantity_must_be_positive(self):
        with pytest.raises(InvalidInputError):
            resolve_price([self.BULK], "P1", "USD", as_of=JUNE_1, quantity=0)

    def test_duplicate_thresholds_rejected(self):
        with pytest.raises(InvalidInputError, match="Duplicate quantity threshold"):
            _book("BAD", quantity_breaks={"P1": [PriceTier(5, 1), PriceTier(5, 2)]})

    def test_breaks_for_unpriced_product_rejected(self):
        with pytest.raises(InvalidInputError, match="unpriced"):
            _book("BAD", quantity_breaks={"P9": [PriceTier(5, 1)]})
