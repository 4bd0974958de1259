"""
Commerce Inventory Engine - Public API
======================================
"""

from engines.inventory.errors import (
    InsufficientStockError,
    InvalidHandleError,
    InventoryError,
    InventoryItemInUseError,
    UnknownInventoryItemError,
    UnknownWarehouseError,
)
from engines.inventory.ledger import InventoryLedger
from engines.inventory.models import (
    InventoryItem,
    ReorderSuggestion,
    ReservationHandle,
    StockStatus,
    Warehouse,
)

__all__ = [
    "InventoryLedger",
    "InventoryItem",
    "ReservationHandle",
    "ReorderSuggestion",
    "StockStatus",
    "Warehouse",
    "InventoryError",
    "InsufficientStockError",
    "InvalidHandleError",
    "InventoryItemInUseError",
    "UnknownInventoryItemError",
    "UnknownWarehouseError",
]
