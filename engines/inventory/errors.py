"""
Commerce Inventory Engine - Errors
==================================
"""

from __future__ import annotations

from core.errors import CommerceError, InvalidInputError


class InventoryError(CommerceError):
    """Base error for inventory ledger operations."""

    code = "INVENTORY_ERROR"


class InsufficientStockError(InventoryError):
    """Reservation exceeds what is available. Nothing was reserved."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, sku: str, warehouse_id: str, requested: int, available: int):
        self.sku = sku
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock: {available} available, {requested} "
            f"requested for SKU '{sku}' at warehouse '{warehouse_id}'."
        )

    def details(self) -> dict:
        return {
            "sku": self.sku,
            "warehouse_id": self.warehouse_id,
            "requested": self.requested,
            "available": self.available,
        }


class InvalidHandleError(InventoryError):
    """Handle is unknown, forged, or already released / fulfilled."""

    code = "INVALID_HANDLE"

    def __init__(self, handle_id: str):
        self.handle_id = handle_id
        super().__init__(
            f"Reservation handle '{handle_id}' is unknown or already consumed."
        )

    def details(self) -> dict:
        return {"handle_id": self.handle_id}


class UnknownWarehouseError(InvalidInputError):
    """Stock referenced a warehouse that was never registered."""

    def __init__(self, warehouse_id: str):
        self.warehouse_id = warehouse_id
        super().__init__(
            f"Warehouse '{warehouse_id}' is not registered.",
            field_name="warehouse_id",
        )


class UnknownInventoryItemError(InvalidInputError):
    """No inventory row exists for the (sku, warehouse) pair."""

    def __init__(self, sku: str, warehouse_id: str):
        self.sku = sku
        self.warehouse_id = warehouse_id
        super().__init__(
            f"No inventory row for SKU '{sku}' at warehouse '{warehouse_id}'.",
            field_name="sku",
        )


class InventoryItemInUseError(InventoryError):
    """Row still holds stock or reservations and cannot be removed."""

    code = "ITEM_IN_USE"

    def __init__(self, sku: str, warehouse_id: str, quantity: int, reserved: int):
        self.sku = sku
        self.warehouse_id = warehouse_id
        self.quantity = quantity
        self.reserved = reserved
        super().__init__(
            f"Inventory row SKU '{sku}' at warehouse '{warehouse_id}' still "
            f"holds quantity={quantity}, reserved={reserved}."
        )

    def details(self) -> dict:
        return {
            "sku": self.sku,
            "warehouse_id": self.warehouse_id,
            "quantity": self.quantity,
            "reserved": self.reserved,
        }
