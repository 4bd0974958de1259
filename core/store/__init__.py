"""
Commerce Entity Store - Public API
==================================
"""

from core.store.memory import InMemoryEntityStore, UnknownEntityKindError
from core.store.protocol import (
    ENTITY_KINDS,
    KIND_INVENTORY_ITEM,
    KIND_PRICE_BOOK,
    KIND_WAREHOUSE,
    EntityStore,
)

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "UnknownEntityKindError",
    "ENTITY_KINDS",
    "KIND_WAREHOUSE",
    "KIND_INVENTORY_ITEM",
    "KIND_PRICE_BOOK",
]
