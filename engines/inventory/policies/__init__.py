"""
Commerce Inventory Engine - Policies
====================================
Pure rules over a single InventoryItem. No state, no locking.
"""

from __future__ import annotations

from typing import Optional

from engines.inventory.models import InventoryItem


def suggested_reorder_quantity(item: InventoryItem) -> Optional[int]:
    """
    Replenishment size for a low-stock row, None when the row is healthy.

    A configured reorder_quantity wins. Otherwise suggest the shortfall
    that lifts available just above the reorder point.
    """
    if not item.is_low_stock:
        return None
    if item.reorder_quantity is not None:
        return item.reorder_quantity
    return item.reorder_point - item.available + 1


def is_removable(item: InventoryItem) -> bool:
    """A row may only leave the ledger once it holds nothing."""
    return item.is_empty
