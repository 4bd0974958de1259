"""
Commerce Inventory Engine - Reservation Ledger
==============================================
Engine: Inventory

Owns quantity / reservation state per (sku, warehouse_id) and is the
only place that mutates it.

RULES (NON-NEGOTIABLE):
- available = quantity - reserved, and available >= 0 at every instant
- reserve() checks and increments under the row lock (never oversells)
- receive / reserve / release / fulfill on the same row are serialized;
  different rows proceed in parallel
- A reservation handle is consumed at most once (release OR fulfill)
- Input is validated before any mutation; a failed call changes nothing
- No waiting for stock: reserve() succeeds or raises immediately

Rows live in the entity store as immutable InventoryItem records.
Readers (status, low_stock_items) never take the row locks.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from core.errors import (
    InvalidInputError,
    require_identifier,
    require_non_negative_int,
    require_positive_int,
)
from core.store.protocol import (
    KIND_INVENTORY_ITEM,
    KIND_WAREHOUSE,
    EntityStore,
)
from core.time.clock import Clock, SystemClock
from engines.inventory.errors import (
    InsufficientStockError,
    InvalidHandleError,
    InventoryItemInUseError,
    UnknownInventoryItemError,
    UnknownWarehouseError,
)
from engines.inventory.models import (
    InventoryItem,
    ReorderSuggestion,
    ReservationHandle,
    StockStatus,
    Warehouse,
)
from engines.inventory.policies import is_removable, suggested_reorder_quantity

logger = logging.getLogger("commerce.inventory")

RowKey = Tuple[str, str]

# Marks an omitted keyword, distinct from an explicit None (clear).
_UNCHANGED = object()


def _new_handle_id() -> str:
    return str(uuid.uuid4())


class InventoryLedger:
    """
    Inventory ledger over an entity store.

    Usage:
        ledger = InventoryLedger(store)
        ledger.register_warehouse("W1", "Main")
        ledger.receive("ABC", "W1", 10)
        handle = ledger.reserve("ABC", "W1", 7)
        ledger.fulfill(handle)
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        clock: Clock | None = None,
        handle_id_factory: Callable[[], str] | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._handle_id_factory = handle_id_factory or _new_handle_id

        self._row_locks: Dict[RowKey, threading.Lock] = {}
        self._row_locks_guard = threading.Lock()
        self._warehouse_lock = threading.Lock()

        # Lock order: row lock, then _handles_lock. Never the reverse.
        self._open_handles: Dict[str, ReservationHandle] = {}
        self._handles_lock = threading.Lock()

    # ══════════════════════════════════════════════════════════
    # WAREHOUSES
    # ══════════════════════════════════════════════════════════

    def register_warehouse(self, warehouse_id: str, name: str) -> Warehouse:
        warehouse = Warehouse(warehouse_id=warehouse_id, name=name)
        with self._warehouse_lock:
            if self._store.get(KIND_WAREHOUSE, warehouse.warehouse_id) is not None:
                raise InvalidInputError(
                    f"Warehouse '{warehouse.warehouse_id}' is already registered.",
                    field_name="warehouse_id",
                )
            self._store.put(KIND_WAREHOUSE, warehouse.warehouse_id, warehouse)
        logger.info(f"Warehouse registered: '{warehouse.warehouse_id}' ({warehouse.name})")
        return warehouse

    def rename_warehouse(self, warehouse_id: str, name: str) -> Warehouse:
        """Rename is the only change allowed once a warehouse exists."""
        renamed = Warehouse(warehouse_id=warehouse_id, name=name)
        with self._warehouse_lock:
            self._require_warehouse(renamed.warehouse_id)
            self._store.put(KIND_WAREHOUSE, renamed.warehouse_id, renamed)
        logger.info(f"Warehouse renamed: '{renamed.warehouse_id}' -> {renamed.name}")
        return renamed

    def get_warehouse(self, warehouse_id: str) -> Optional[Warehouse]:
        return self._store.get(KIND_WAREHOUSE, warehouse_id)

    def list_warehouses(self) -> Tuple[Warehouse, ...]:
        return tuple(
            sorted(self._store.values(KIND_WAREHOUSE), key=lambda w: w.warehouse_id)
        )

    def _require_warehouse(self, warehouse_id: str) -> Warehouse:
        warehouse = self.get_warehouse(warehouse_id)
        if warehouse is None:
            raise UnknownWarehouseError(warehouse_id)
        return warehouse

    # ══════════════════════════════════════════════════════════
    # ROW LOCKS
    # ══════════════════════════════════════════════════════════

    def _row_lock(self, key: RowKey) -> threading.Lock:
        with self._row_locks_guard:
            lock = self._row_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._row_locks[key] = lock
            return lock

    @contextmanager
    def _locked_row(self, key: RowKey) -> Iterator[None]:
        """
        Hold the row lock. A lock dropped by remove_item while we waited
        on it is stale, so retry against the current one.
        """
        while True:
            lock = self._row_lock(key)
            lock.acquire()
            with self._row_locks_guard:
                current = self._row_locks.get(key)
            if current is lock:
                break
            lock.release()
        try:
            yield
        finally:
            lock.release()

    def _drop_row_lock(self, key: RowKey) -> None:
        # Caller holds the row lock.
        with self._row_locks_guard:
            self._row_locks.pop(key, None)

    def _existing_row(self, key: RowKey) -> InventoryItem:
        item = self._get_item(key)
        if item is None:
            raise UnknownInventoryItemError(*key)
        return item

    def _get_item(self, key: RowKey) -> Optional[InventoryItem]:
        return self._store.get(KIND_INVENTORY_ITEM, key)

    def _put_item(self, item: InventoryItem) -> None:
        self._store.put(KIND_INVENTORY_ITEM, item.key, item)

    def _validate_row(self, sku, warehouse_id) -> RowKey:
        sku = require_identifier(sku, "sku")
        warehouse_id = require_identifier(warehouse_id, "warehouse_id")
        self._require_warehouse(warehouse_id)
        return (sku, warehouse_id)

    # ══════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════

    def receive(self, sku: str, warehouse_id: str, quantity: int) -> StockStatus:
        """Add on-hand stock, creating the row on first receipt."""
        key = self._validate_row(sku, warehouse_id)
        require_positive_int(quantity, "quantity")

        with self._locked_row(key):
            current = self._get_item(key) or InventoryItem(sku=key[0], warehouse_id=key[1])
            updated = current.with_changes(quantity=current.quantity + quantity)
            self._put_item(updated)

        logger.info(
            f"Stock received: {quantity} x '{key[0]}' at '{key[1]}' "
            f"(on hand {updated.quantity})"
        )
        return updated.status()

    def reserve(self, sku: str, warehouse_id: str, quantity: int) -> ReservationHandle:
        """
        Hold ``quantity`` units against an open order.

        Raises:
            InsufficientStockError: available < quantity (nothing reserved).
            InvalidInputError: bad sku / warehouse / quantity.
        """
        key = self._validate_row(sku, warehouse_id)
        require_positive_int(quantity, "quantity")
        if self._get_item(key) is None:
            self._reject_reservation(key, quantity, 0)

        with self._locked_row(key):
            current = self._get_item(key)
            available = current.available if current is not None else 0
            if current is None or available < quantity:
                self._reject_reservation(key, quantity, available)

            handle = ReservationHandle(
                handle_id=self._handle_id_factory(),
                sku=key[0],
                warehouse_id=key[1],
                quantity=quantity,
                reserved_at=self._clock.now_utc(),
            )
            self._put_item(current.with_changes(reserved=current.reserved + quantity))
            with self._handles_lock:
                self._open_handles[handle.handle_id] = handle

        logger.info(
            f"Stock reserved: {quantity} x '{key[0]}' at '{key[1]}' "
            f"(handle {handle.handle_id})"
        )
        return handle

    def _reject_reservation(self, key: RowKey, quantity: int, available: int) -> None:
        logger.warning(
            f"Reservation rejected: {quantity} x '{key[0]}' at "
            f"'{key[1]}', only {available} available"
        )
        raise InsufficientStockError(key[0], key[1], quantity, available)

    def release(self, handle: ReservationHandle) -> StockStatus:
        """Return a reservation's units to available."""
        updated = self._consume_handle(handle, fulfil=False)
        logger.info(
            f"Reservation released: {handle.quantity} x '{handle.sku}' at "
            f"'{handle.warehouse_id}' (handle {handle.handle_id})"
        )
        return updated.status()

    def fulfill(self, handle: ReservationHandle) -> StockStatus:
        """Ship a reservation: quantity and reserved drop together."""
        updated = self._consume_handle(handle, fulfil=True)
        logger.info(
            f"Reservation fulfilled: {handle.quantity} x '{handle.sku}' left "
            f"'{handle.warehouse_id}' (handle {handle.handle_id})"
        )
        return updated.status()

    def _consume_handle(self, handle: ReservationHandle, *, fulfil: bool) -> InventoryItem:
        if not isinstance(handle, ReservationHandle):
            raise InvalidInputError(
                f"Expected ReservationHandle, got {type(handle).__name__}.",
                field_name="handle",
            )

        with self._locked_row(handle.key):
            with self._handles_lock:
                held = self._open_handles.get(handle.handle_id)
            if held is None or held != handle:
                raise InvalidHandleError(handle.handle_id)

            current = self._get_item(handle.key)
            if current is None or current.reserved < handle.quantity:
                # Row was tampered with outside the ledger.
                raise InvalidHandleError(handle.handle_id)

            changes = {"reserved": current.reserved - handle.quantity}
            if fulfil:
                changes["quantity"] = current.quantity - handle.quantity
            updated = current.with_changes(**changes)
            self._put_item(updated)

            with self._handles_lock:
                del self._open_handles[handle.handle_id]

        return updated

    def set_reorder_point(
        self,
        sku: str,
        warehouse_id: str,
        reorder_point: Optional[int],
        reorder_quantity=_UNCHANGED,
    ) -> StockStatus:
        """
        Configure (or clear with None) the low-stock threshold of a row.

        ``reorder_quantity`` is only written when passed; None clears it.
        """
        key = self._validate_row(sku, warehouse_id)
        changes = {"reorder_point": reorder_point}
        if reorder_point is not None:
            require_non_negative_int(reorder_point, "reorder_point")
        if reorder_quantity is not _UNCHANGED:
            if reorder_quantity is not None:
                require_positive_int(reorder_quantity, "reorder_quantity")
            changes["reorder_quantity"] = reorder_quantity
        self._existing_row(key)

        with self._locked_row(key):
            updated = self._existing_row(key).with_changes(**changes)
            self._put_item(updated)

        logger.info(
            f"Reorder point set: '{key[0]}' at '{key[1]}' -> {reorder_point}"
        )
        return updated.status()

    def remove_item(self, sku: str, warehouse_id: str) -> None:
        """Delete a row. Only valid once quantity and reserved are both 0."""
        key = self._validate_row(sku, warehouse_id)
        self._existing_row(key)
        with self._locked_row(key):
            current = self._existing_row(key)
            if not is_removable(current):
                raise InventoryItemInUseError(
                    key[0], key[1], current.quantity, current.reserved
                )
            self._store.delete(KIND_INVENTORY_ITEM, key)
            self._drop_row_lock(key)
        logger.info(f"Inventory row removed: '{key[0]}' at '{key[1]}'")

    # ══════════════════════════════════════════════════════════
    # QUERIES (lock-free snapshots)
    # ══════════════════════════════════════════════════════════

    def status(self, sku: str, warehouse_id: str) -> StockStatus:
        """
        Availability of one row. A pair that never received stock reports
        all zeros and is not low-stock.
        """
        sku = require_identifier(sku, "sku")
        warehouse_id = require_identifier(warehouse_id, "warehouse_id")
        item = self._get_item((sku, warehouse_id))
        if item is None:
            return StockStatus(
                sku=sku,
                warehouse_id=warehouse_id,
                quantity=0,
                reserved=0,
                available=0,
                is_low_stock=False,
            )
        return item.status()

    def items(
        self,
        warehouse_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[InventoryItem, ...]:
        """Rows ordered by (warehouse_id, sku), optionally filtered."""
        needle = search.strip().lower() if search else None
        selected: List[InventoryItem] = []
        for item in self._store.values(KIND_INVENTORY_ITEM):
            if warehouse_id is not None and item.warehouse_id != warehouse_id:
                continue
            if needle and needle not in item.sku.lower():
                continue
            selected.append(item)
        return tuple(sorted(selected, key=lambda i: (i.warehouse_id, i.sku)))

    def low_stock_items(self) -> Tuple[InventoryItem, ...]:
        """
        Every row currently at or below its reorder point. Each row is
        read atomically; the set is not one global instant.
        """
        return tuple(item for item in self.items() if item.is_low_stock)

    def reorder_suggestions(self) -> Tuple[ReorderSuggestion, ...]:
        return tuple(
            ReorderSuggestion(item=item, suggested_quantity=suggested_reorder_quantity(item))
            for item in self.low_stock_items()
        )

    # ══════════════════════════════════════════════════════════
    # OPEN RESERVATIONS
    # ══════════════════════════════════════════════════════════

    def open_reservation(self, handle_id: str) -> ReservationHandle:
        """Look up a held handle by id (callers that persist only the id)."""
        handle_id = require_identifier(handle_id, "handle_id")
        with self._handles_lock:
            handle = self._open_handles.get(handle_id)
        if handle is None:
            raise InvalidHandleError(handle_id)
        return handle

    def open_reservations(
        self,
        sku: Optional[str] = None,
        warehouse_id: Optional[str] = None,
    ) -> Tuple[ReservationHandle, ...]:
        with self._handles_lock:
            handles = tuple(self._open_handles.values())
        selected = [
            h for h in handles
            if (sku is None or h.sku == sku)
            and (warehouse_id is None or h.warehouse_id == warehouse_id)
        ]
        return tuple(sorted(selected, key=lambda h: (h.reserved_at, h.handle_id)))
