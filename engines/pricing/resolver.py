"""
Commerce Pricing Engine - Price Resolution
==========================================
Engine: Pricing

Selects the single applicable unit price for a request. Resolution is a
pure function of (price books, product, currency, customer group, instant,
quantity): the iteration order of the book collection never matters.

Ranking, applied in order over the applicable books:
1. Group:    a book for the requested customer group (rank 0) beats a
             group-agnostic book (rank 1).
2. Window:   fully bounded beats half-open beats unbounded; among fully
             bounded windows the narrower one wins.
3. Default:  only among group-agnostic books, a default book wins.
Anything still tied raises AmbiguousPriceBooksError.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from core.errors import require_identifier, require_positive_int
from core.primitives.money import Money, normalize_currency
from core.time.clock import require_aware
from engines.pricing.errors import AmbiguousPriceBooksError, NoPriceFoundError
from engines.pricing.models import PriceBook, ResolvedPrice

logger = logging.getLogger("commerce.pricing")

GROUP_RANK_EXACT = 0
GROUP_RANK_AGNOSTIC = 1


def is_applicable(
    book: PriceBook,
    product_id: str,
    currency: str,
    customer_group_id: Optional[str],
    as_of: datetime,
) -> bool:
    if not book.is_active:
        return False
    if book.currency != currency:
        return False
    if product_id not in book.prices:
        return False
    if not book.window.contains(as_of):
        return False
    if book.customer_group_id is not None and book.customer_group_id != customer_group_id:
        return False
    return True


def group_rank(book: PriceBook) -> int:
    # Applicable group-scoped books always match the requested group.
    return GROUP_RANK_AGNOSTIC if book.is_group_agnostic else GROUP_RANK_EXACT


def rank_candidates(
    price_books: Iterable[PriceBook],
    product_id: str,
    currency: str,
    customer_group_id: Optional[str],
    as_of: datetime,
) -> List[PriceBook]:
    """
    Books that survive every tie-break, ordered by id.

    An empty list means nothing applies; more than one means ambiguity.
    """
    candidates = [
        book for book in price_books
        if is_applicable(book, product_id, currency, customer_group_id, as_of)
    ]
    if not candidates:
        return []

    best_group = min(group_rank(book) for book in candidates)
    candidates = [book for book in candidates if group_rank(book) == best_group]

    best_window = min(book.window.specificity_key() for book in candidates)
    candidates = [
        book for book in candidates if book.window.specificity_key() == best_window
    ]

    if len(candidates) > 1 and best_group == GROUP_RANK_AGNOSTIC:
        defaults = [book for book in candidates if book.is_default]
        if defaults:
            candidates = defaults

    return sorted(candidates, key=lambda book: book.price_book_id)


def resolve_price(
    price_books: Iterable[PriceBook],
    product_id: str,
    currency: str,
    customer_group_id: Optional[str] = None,
    *,
    as_of: datetime,
    quantity: int = 1,
) -> ResolvedPrice:
    """
    Resolve the unit price of ``product_id``.

    Raises:
        NoPriceFoundError: no applicable book.
        AmbiguousPriceBooksError: tie after every tie-break.
        InvalidInputError: malformed currency, instant or quantity.
    """
    product_id = require_identifier(product_id, "product_id")
    currency = normalize_currency(currency)
    require_aware(as_of, "as_of")
    require_positive_int(quantity, "quantity")
    if customer_group_id is not None:
        if isinstance(customer_group_id, str) and not customer_group_id.strip():
            customer_group_id = None
        else:
            customer_group_id = require_identifier(customer_group_id, "customer_group_id")

    winners = rank_candidates(price_books, product_id, currency, customer_group_id, as_of)
    if not winners:
        logger.debug(
            f"No price: '{product_id}' {currency} group={customer_group_id} "
            f"as_of={as_of.isoformat()}"
        )
        raise NoPriceFoundError(product_id, currency, customer_group_id, as_of)
    if len(winners) > 1:
        ids = [book.price_book_id for book in winners]
        logger.warning(
            f"Ambiguous price books for '{product_id}' {currency}: {', '.join(ids)}"
        )
        raise AmbiguousPriceBooksError(product_id, currency, ids)

    book = winners[0]
    amount, tier = book.unit_amount_for(product_id, quantity)
    logger.debug(
        f"Price resolved: '{product_id}' {currency} group={customer_group_id} "
        f"-> {amount} from '{book.price_book_id}'"
    )
    return ResolvedPrice(
        product_id=product_id,
        price_book_id=book.price_book_id,
        unit_price=Money(amount=amount, currency=book.currency),
        quantity=quantity,
        tier=tier,
        customer_group_id=book.customer_group_id,
    )
