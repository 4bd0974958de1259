"""
Commerce Entity Store - Protocol
================================
Synchronous key-value collaborator for Warehouse, InventoryItem and
PriceBook records. Engines only ever put immutable records, so a put is
an atomic replacement and a reader sees either the old record or the new
one, never a half-written one.

Durability, caching and transport belong to the implementation, not to
the engines.
"""

from __future__ import annotations

from typing import Any, Hashable, Optional, Protocol

KIND_WAREHOUSE = "warehouse"
KIND_INVENTORY_ITEM = "inventory_item"
KIND_PRICE_BOOK = "price_book"

ENTITY_KINDS = frozenset({
    KIND_WAREHOUSE,
    KIND_INVENTORY_ITEM,
    KIND_PRICE_BOOK,
})


class EntityStore(Protocol):
    def get(self, kind: str, key: Hashable) -> Optional[Any]:
        ...

    def put(self, kind: str, key: Hashable, record: Any) -> None:
        ...

    def delete(self, kind: str, key: Hashable) -> bool:
        ...

    def values(self, kind: str) -> tuple:
        """Snapshot of every record of ``kind``."""
        ...
