"""
Commerce Pricing Engine - Price Book Catalog
============================================
Administrative writes and read-side resolution over the entity store.

Write-time invariants (checked under the catalog write lock):
- Per currency, at most one standing default: is_default, no customer
  group, unbounded validity. A second one would make every later
  resolution ambiguous by construction.
- The only active default of a currency stays one. Deleting it, or
  replacing it with a version that is no longer an active default of
  that currency, is refused until another default exists.

Resolution takes a snapshot of the books under the same lock, so a
multi-record write (promote_default) is never observed half-applied,
then ranks outside the lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional, Tuple

from core.config.settings import CommerceSettings
from core.errors import InvalidInputError, require_identifier
from core.store.protocol import KIND_PRICE_BOOK, EntityStore
from core.time.clock import Clock, SystemClock
from engines.pricing.errors import (
    DefaultPriceBookConflictError,
    DefaultPriceBookRequiredError,
    UnknownPriceBookError,
)
from engines.pricing.models import PriceBook, ResolvedPrice
from engines.pricing.resolver import resolve_price

logger = logging.getLogger("commerce.pricing")


class PriceBookCatalog:
    """
    Usage:
        catalog = PriceBookCatalog(store, settings=CommerceSettings(("USD",)))
        catalog.upsert_price_book(book)
        price = catalog.resolve_price("P1", "USD", "wholesale", as_of=at)
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        settings: CommerceSettings | None = None,
        clock: Clock | None = None,
    ):
        self._store = store
        self._settings = settings or CommerceSettings()
        self._clock = clock or SystemClock()
        self._write_lock = threading.Lock()

    @property
    def settings(self) -> CommerceSettings:
        return self._settings

    # ══════════════════════════════════════════════════════════
    # WRITES
    # ══════════════════════════════════════════════════════════

    def upsert_price_book(self, book: PriceBook) -> PriceBook:
        """Create or replace a book by id."""
        if not isinstance(book, PriceBook):
            raise InvalidInputError(
                f"Expected PriceBook, got {type(book).__name__}.",
                field_name="price_book",
            )
        self._settings.check_currency(book.currency)

        with self._write_lock:
            if book.is_standing_default:
                conflicts = self._standing_defaults(
                    book.currency, exclude=book.price_book_id
                )
                if conflicts:
                    raise DefaultPriceBookConflictError(
                        book.currency, [b.price_book_id for b in conflicts]
                    )
            previous = self.get_price_book(book.price_book_id)
            if previous is not None:
                self._check_default_retained(previous, book)
            created = previous is None
            self._store.put(KIND_PRICE_BOOK, book.price_book_id, book)

        logger.info(
            f"Price book {'created' if created else 'updated'}: "
            f"'{book.price_book_id}' {book.currency}, {len(book.prices)} prices"
        )
        return book

    def delete_price_book(self, price_book_id: str) -> None:
        price_book_id = require_identifier(price_book_id, "price_book_id")
        with self._write_lock:
            book = self._require(price_book_id)
            self._check_default_retained(book, None)
            self._store.delete(KIND_PRICE_BOOK, price_book_id)
        logger.info(f"Price book deleted: '{price_book_id}'")

    def promote_default(self, price_book_id: str) -> PriceBook:
        """
        Make ``price_book_id`` a default for its currency. Standing
        defaults it would conflict with lose the flag in the same step.
        """
        price_book_id = require_identifier(price_book_id, "price_book_id")
        with self._write_lock:
            book = self._require(price_book_id)
            if not book.is_active:
                raise InvalidInputError(
                    f"Price book '{price_book_id}' is inactive and cannot be a default.",
                    field_name="price_book_id",
                )
            promoted = replace(book, is_default=True)
            demoted = []
            if promoted.is_standing_default:
                for other in self._standing_defaults(book.currency, exclude=price_book_id):
                    self._store.put(
                        KIND_PRICE_BOOK, other.price_book_id, replace(other, is_default=False)
                    )
                    demoted.append(other.price_book_id)
            self._store.put(KIND_PRICE_BOOK, price_book_id, promoted)

        logger.info(
            f"Price book promoted to default: '{price_book_id}' {book.currency}"
            + (f" (demoted {', '.join(demoted)})" if demoted else "")
        )
        return promoted

    def _require(self, price_book_id: str) -> PriceBook:
        book = self.get_price_book(price_book_id)
        if book is None:
            raise UnknownPriceBookError(price_book_id)
        return book

    def _check_default_retained(
        self, previous: PriceBook, replacement: Optional[PriceBook]
    ) -> None:
        """
        Refuse a write (replacement None means delete) that leaves the
        currency of ``previous`` without an active default book.
        """
        if not previous.is_active_default:
            return
        if (
            replacement is not None
            and replacement.is_active_default
            and replacement.currency == previous.currency
        ):
            return
        others = [
            b for b in self._store.values(KIND_PRICE_BOOK)
            if b.price_book_id != previous.price_book_id
            and b.currency == previous.currency
            and b.is_active_default
        ]
        if not others:
            raise DefaultPriceBookRequiredError(previous.price_book_id, previous.currency)

    def _standing_defaults(self, currency: str, *, exclude: str) -> list[PriceBook]:
        return sorted(
            (
                b for b in self._store.values(KIND_PRICE_BOOK)
                if b.price_book_id != exclude
                and b.currency == currency
                and b.is_standing_default
            ),
            key=lambda b: b.price_book_id,
        )

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_price_book(self, price_book_id: str) -> Optional[PriceBook]:
        return self._store.get(KIND_PRICE_BOOK, price_book_id)

    def list_price_books(self, currency: Optional[str] = None) -> Tuple[PriceBook, ...]:
        books = self._snapshot()
        if currency is not None:
            currency = self._settings.check_currency(currency)
            books = tuple(b for b in books if b.currency == currency)
        return tuple(sorted(books, key=lambda b: b.price_book_id))

    def _snapshot(self) -> Tuple[PriceBook, ...]:
        with self._write_lock:
            return self._store.values(KIND_PRICE_BOOK)

    def resolve_price(
        self,
        product_id: str,
        currency: str,
        customer_group_id: Optional[str] = None,
        *,
        as_of: Optional[datetime] = None,
        quantity: int = 1,
    ) -> ResolvedPrice:
        """Resolve against the current book set; ``as_of`` defaults to now."""
        currency = self._settings.check_currency(currency)
        if as_of is None:
            as_of = self._clock.now_utc()
        return resolve_price(
            self._snapshot(),
            product_id,
            currency,
            customer_group_id,
            as_of=as_of,
            quantity=quantity,
        )
