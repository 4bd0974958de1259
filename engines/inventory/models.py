"""
Commerce Inventory Engine - Records
===================================
Immutable records stored in the entity store. Mutation means building a
new record and replacing the old one; ``available`` is always derived.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple

from core.errors import (
    InvalidInputError,
    require_identifier,
    require_non_negative_int,
    require_positive_int,
)


@dataclass(frozen=True)
class Warehouse:
    warehouse_id: str
    name: str

    def __post_init__(self):
        object.__setattr__(
            self, "warehouse_id", require_identifier(self.warehouse_id, "warehouse_id")
        )
        object.__setattr__(self, "name", require_identifier(self.name, "name"))

    def to_dict(self) -> dict:
        return {"warehouse_id": self.warehouse_id, "name": self.name}


# ══════════════════════════════════════════════════════════════
# INVENTORY ITEM (one row per sku + warehouse)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InventoryItem:
    """
    Stock row for a (sku, warehouse_id) pair.

    quantity:          on hand
    reserved:          held against open reservations
    reorder_point:     low-stock threshold, None when not configured
    reorder_quantity:  suggested replenishment size, None when not configured

    Invariant: 0 <= reserved <= quantity, so available is never negative.
    """
    sku: str
    warehouse_id: str
    quantity: int = 0
    reserved: int = 0
    reorder_point: Optional[int] = None
    reorder_quantity: Optional[int] = None

    def __post_init__(self):
        require_non_negative_int(self.quantity, "quantity")
        require_non_negative_int(self.reserved, "reserved")
        if self.reserved > self.quantity:
            raise InvalidInputError(
                f"reserved ({self.reserved}) cannot exceed quantity "
                f"({self.quantity}).",
                field_name="reserved",
            )
        if self.reorder_point is not None:
            require_non_negative_int(self.reorder_point, "reorder_point")
        if self.reorder_quantity is not None:
            require_positive_int(self.reorder_quantity, "reorder_quantity")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.sku, self.warehouse_id)

    @property
    def available(self) -> int:
        return self.quantity - self.reserved

    @property
    def is_low_stock(self) -> bool:
        return self.reorder_point is not None and self.available <= self.reorder_point

    @property
    def is_empty(self) -> bool:
        return self.quantity == 0 and self.reserved == 0

    def with_changes(self, **changes) -> InventoryItem:
        return replace(self, **changes)

    def status(self) -> StockStatus:
        return StockStatus(
            sku=self.sku,
            warehouse_id=self.warehouse_id,
            quantity=self.quantity,
            reserved=self.reserved,
            available=self.available,
            is_low_stock=self.is_low_stock,
            reorder_point=self.reorder_point,
        )

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "warehouse_id": self.warehouse_id,
            "quantity": self.quantity,
            "reserved": self.reserved,
            "available": self.available,
            "reorder_point": self.reorder_point,
            "reorder_quantity": self.reorder_quantity,
            "is_low_stock": self.is_low_stock,
        }


@dataclass(frozen=True)
class StockStatus:
    """Point-in-time availability of one row."""
    sku: str
    warehouse_id: str
    quantity: int
    reserved: int
    available: int
    is_low_stock: bool
    reorder_point: Optional[int] = None

    def as_tuple(self) -> Tuple[int, int, int, bool]:
        return (self.quantity, self.reserved, self.available, self.is_low_stock)

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "warehouse_id": self.warehouse_id,
            "quantity": self.quantity,
            "reserved": self.reserved,
            "available": self.available,
            "is_low_stock": self.is_low_stock,
            "reorder_point": self.reorder_point,
        }


# ══════════════════════════════════════════════════════════════
# RESERVATION HANDLE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ReservationHandle:
    """
    Token for a successful reserve(). Required to release or fulfill it,
    and usable exactly once.
    """
    handle_id: str
    sku: str
    warehouse_id: str
    quantity: int
    reserved_at: datetime

    @property
    def key(self) -> Tuple[str, str]:
        return (self.sku, self.warehouse_id)

    def to_dict(self) -> dict:
        return {
            "handle_id": self.handle_id,
            "sku": self.sku,
            "warehouse_id": self.warehouse_id,
            "quantity": self.quantity,
            "reserved_at": self.reserved_at.isoformat(),
        }


@dataclass(frozen=True)
class ReorderSuggestion:
    item: InventoryItem
    suggested_quantity: int

    def to_dict(self) -> dict:
        return {
            "item": self.item.to_dict(),
            "suggested_quantity": self.suggested_quantity,
        }
