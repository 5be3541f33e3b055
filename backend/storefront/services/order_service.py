"""
Order placement service.

place_order() is the only write path in the system: it reserves stock and
records one order with one line item as a single unit of work. Either the
stock decrement, the order and the line item are all committed, or none of
them is.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Order, OrderItem
from ..models.orders import ORDER_STATUS_PLACED
from storefront.time_utils import utc_today
from . import catalog_service
from .catalog_service import NotFoundError
from .concurrency import ConcurrencyConflictError, begin_write_transaction, run_with_retry
from .inventory_service import check_and_reserve, Reservation
from ..validation import MAX_INTEGER


class OrderPlacementError(Exception):
    """Base class for every rejected placement. `reason` is a stable code."""
    reason = "rejected"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "reason": self.reason, "details": self.details}


class InsufficientStockError(OrderPlacementError):
    reason = "insufficient_stock"


class EntityNotFoundError(OrderPlacementError):
    reason = "not_found"


class InvalidOrderError(OrderPlacementError):
    reason = "invariant_violation"


class DuplicateOrderError(OrderPlacementError):
    reason = "duplicate_id"


class OrderConflictError(OrderPlacementError):
    reason = "concurrent_conflict"


@dataclass(frozen=True)
class PlacedOrder:
    order: Order
    item: OrderItem
    reservation: Reservation

    @property
    def order_id(self) -> int:
        return self.order.order_id

    def to_dict(self) -> dict:
        return {
            "order": self.order.to_dict(),
            "items": [self.item.to_dict()],
            "reservation": self.reservation.to_dict(),
        }


def _validate_request(**ids: int | None) -> None:
    for key, value in ids.items():
        if key == "warehouse_id" and value is None:
            continue
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidOrderError(f"{key} must be an integer", details={"field": key})
        if value <= 0:
            raise InvalidOrderError(f"{key} must be > 0", details={"field": key, "value": value})
        if value > MAX_INTEGER:
            raise InvalidOrderError(
                f"{key} must be <= {MAX_INTEGER}", details={"field": key, "value": value}
            )


def _place_order_locked(
    *,
    order_id: int,
    customer_id: int,
    seller_id: int,
    order_item_id: int,
    product_id: int,
    quantity: int,
    warehouse_id: int | None,
) -> PlacedOrder:
    if db.session.get(Order, order_id) is not None:
        raise DuplicateOrderError(
            f"Order {order_id} already exists", details={"order_id": order_id}
        )
    if db.session.get(OrderItem, order_item_id) is not None:
        raise DuplicateOrderError(
            f"Order item {order_item_id} already exists", details={"order_item_id": order_item_id}
        )

    try:
        product = catalog_service.get_product(product_id)
        catalog_service.require_customer(customer_id)
        catalog_service.require_seller(seller_id)
    except NotFoundError as exc:
        raise EntityNotFoundError(
            str(exc), details={"entity": exc.entity, "id": exc.entity_id}
        ) from exc

    # Price snapshot: copied onto the line, never referenced live
    unit_price_cents = product.price_cents
    if quantity * unit_price_cents > MAX_INTEGER:
        raise InvalidOrderError(
            "Order total is too large",
            details={"quantity": quantity, "price_per_unit_cents": unit_price_cents},
        )

    reservation = check_and_reserve(product_id, quantity, warehouse_id=warehouse_id)
    if not reservation.reserved:
        raise InsufficientStockError(
            "Product not available in requested quantity",
            details={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "requested_quantity": quantity,
                "available": reservation.available,
            },
        )

    order = Order(
        order_id=order_id,
        order_date=utc_today(),
        customer_id=customer_id,
        seller_id=seller_id,
        order_status=ORDER_STATUS_PLACED,
    )
    item = OrderItem(
        order_item_id=order_item_id,
        order_id=order_id,
        product_id=product_id,
        quantity=quantity,
        price_per_unit_cents=unit_price_cents,
        total_sale_cents=quantity * unit_price_cents,
    )
    db.session.add(order)
    db.session.flush()
    db.session.add(item)
    db.session.flush()

    return PlacedOrder(order=order, item=item, reservation=reservation)


def _integrity_rejection(exc: IntegrityError, order_id: int, order_item_id: int) -> OrderPlacementError:
    """Map a constraint failure at flush/commit onto a placement rejection."""
    message = str(exc.orig).lower()
    details = {"order_id": order_id, "order_item_id": order_item_id}
    if "foreign key" in message:
        return EntityNotFoundError("Order references a record that no longer exists", details=details)
    if "unique" in message or "duplicate" in message or "primary key" in message:
        return DuplicateOrderError("Order conflicts with an existing record", details=details)
    return InvalidOrderError("Order violates a database constraint", details=details)


def place_order(
    order_id: int,
    customer_id: int,
    seller_id: int,
    order_item_id: int,
    product_id: int,
    quantity: int,
    *,
    warehouse_id: int | None = None,
) -> PlacedOrder:
    """
    Place a single-line order and decrement inventory in one transaction.

    Raises a subclass of OrderPlacementError on rejection. Rejections are
    detected before commit and always roll the session back, so a rejected
    call never changes stock, however often it is retried.
    """
    _validate_request(
        order_id=order_id,
        customer_id=customer_id,
        seller_id=seller_id,
        order_item_id=order_item_id,
        product_id=product_id,
        quantity=quantity,
        warehouse_id=warehouse_id,
    )

    def _op():
        begin_write_transaction()
        try:
            placed = _place_order_locked(
                order_id=order_id,
                customer_id=customer_id,
                seller_id=seller_id,
                order_item_id=order_item_id,
                product_id=product_id,
                quantity=quantity,
                warehouse_id=warehouse_id,
            )
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise _integrity_rejection(exc, order_id, order_item_id) from exc
        return placed

    try:
        placed = run_with_retry(_op)
    except OrderPlacementError as exc:
        current_app.logger.warning(
            "Order %s rejected (%s): %s", order_id, exc.reason, exc
        )
        raise
    except ConcurrencyConflictError as exc:
        current_app.logger.warning(
            "Order %s rejected after %d attempts: concurrent conflict", order_id, exc.attempts
        )
        raise OrderConflictError(
            "Order could not be placed due to concurrent updates, try again",
            details={"order_id": order_id, "attempts": exc.attempts},
        ) from exc

    current_app.logger.info(
        "Product %s sold (qty %s) on order %s, inventory updated",
        product_id, quantity, order_id,
    )
    return placed


def get_order(order_id: int) -> dict:
    order = db.session.get(Order, order_id)
    if order is None:
        raise EntityNotFoundError(f"order {order_id} not found", details={"entity": "order", "id": order_id})

    items = (
        db.session.query(OrderItem)
        .filter_by(order_id=order_id)
        .order_by(OrderItem.order_item_id.asc())
        .all()
    )
    return {
        "order": order.to_dict(),
        "items": [item.to_dict() for item in items],
        "order_total_cents": sum(item.total_sale_cents for item in items),
    }
