# Overview: Service-layer operations for inventory; encapsulates stock reads and reservation.

# backend/storefront/services/inventory_service.py

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import func

from ..extensions import db
from ..models import InventoryRecord
from storefront.time_utils import to_iso_date
from .concurrency import lock_for_update
"""
Inventory invariants (authoritative)

Stock model:
- Stock is held per (product, warehouse) in InventoryRecord.stock.
- stock >= 0 always (CHECK constraint + reservation check).

Warehouse selection:
- Without a warehouse_id, available stock is the SUM over every warehouse row
  of the product, and a reservation drains rows in ascending
  (warehouse_id, inventory_id) order, rows without a warehouse last.
- With a warehouse_id, only that warehouse's rows are read and decremented.

Reservation:
- check_and_reserve() locks the candidate rows, compares the total with the
  requested quantity and either decrements (reserved) or leaves every row
  untouched (insufficient stock).
- It flushes but never commits: the caller's transaction decides whether the
  decrement becomes visible, together with the order it pays for.
"""


@dataclass(frozen=True)
class Allocation:
    inventory_id: int
    warehouse_id: int | None
    quantity: int


@dataclass(frozen=True)
class Reservation:
    product_id: int
    requested: int
    available: int
    reserved: bool
    allocations: list[Allocation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
            "reserved": self.reserved,
            "allocations": [
                {
                    "inventory_id": a.inventory_id,
                    "warehouse_id": a.warehouse_id,
                    "quantity": a.quantity,
                }
                for a in self.allocations
            ],
        }


def _stock_rows_query(product_id: int, warehouse_id: int | None):
    q = db.session.query(InventoryRecord).filter(InventoryRecord.product_id == product_id)
    if warehouse_id is not None:
        q = q.filter(InventoryRecord.warehouse_id == warehouse_id)
    return q.order_by(
        InventoryRecord.warehouse_id.is_(None),
        InventoryRecord.warehouse_id.asc(),
        InventoryRecord.inventory_id.asc(),
    )


def get_available_stock(product_id: int, warehouse_id: int | None = None) -> int:
    q = db.session.query(
        func.coalesce(func.sum(InventoryRecord.stock), 0)
    ).filter(InventoryRecord.product_id == product_id)
    if warehouse_id is not None:
        q = q.filter(InventoryRecord.warehouse_id == warehouse_id)
    return int(q.scalar() or 0)


def get_stock_levels(product_id: int) -> list[InventoryRecord]:
    return _stock_rows_query(product_id, None).all()


def check_and_reserve(
    product_id: int,
    quantity: int,
    *,
    warehouse_id: int | None = None,
) -> Reservation:
    """
    Atomically confirm and deduct stock for a pending order.

    Must run inside the caller's write transaction (see
    concurrency.begin_write_transaction). A StaleDataError raised by the
    flush means another writer got to the same row first; the caller's
    retry loop handles it.
    """
    if quantity <= 0:
        raise ValueError("quantity must be > 0")

    rows = lock_for_update(_stock_rows_query(product_id, warehouse_id)).all()
    available = sum(max(r.stock, 0) for r in rows)

    if available < quantity:
        return Reservation(
            product_id=product_id,
            requested=quantity,
            available=available,
            reserved=False,
        )

    remaining = quantity
    allocations: list[Allocation] = []
    for row in rows:
        if remaining == 0:
            break
        take = min(row.stock, remaining)
        if take <= 0:
            continue
        row.stock -= take
        remaining -= take
        allocations.append(
            Allocation(inventory_id=row.inventory_id, warehouse_id=row.warehouse_id, quantity=take)
        )

    db.session.flush()

    return Reservation(
        product_id=product_id,
        requested=quantity,
        available=available,
        reserved=True,
        allocations=allocations,
    )


def get_inventory_summary(product_id: int) -> dict:
    rows = get_stock_levels(product_id)
    return {
        "product_id": product_id,
        "total_stock": sum(r.stock for r in rows),
        "warehouses": [
            {
                "inventory_id": r.inventory_id,
                "warehouse_id": r.warehouse_id,
                "stock": r.stock,
                "last_stock_date": to_iso_date(r.last_stock_date),
            }
            for r in rows
        ],
    }
