# Overview: Flask API routes for order placement; parses input and returns JSON responses.

# backend/storefront/routes/orders.py
"""Order placement routes"""

from flask import Blueprint, request, jsonify, current_app

from ..services import order_service
from ..services.order_service import (
    OrderPlacementError,
    InsufficientStockError,
    EntityNotFoundError,
    InvalidOrderError,
    DuplicateOrderError,
    OrderConflictError,
)
from ..validation import PayloadPolicy, validate_payload, ValidationError


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")

PLACE_ORDER_POLICY = PayloadPolicy(
    fields={
        "order_id",
        "customer_id",
        "seller_id",
        "order_item_id",
        "product_id",
        "quantity",
        "warehouse_id",
    },
    required={"order_id", "customer_id", "seller_id", "order_item_id", "product_id", "quantity"},
    nullable={"warehouse_id"},
)

_STATUS_BY_ERROR = (
    (InvalidOrderError, 400),
    (EntityNotFoundError, 404),
    (InsufficientStockError, 409),
    (DuplicateOrderError, 409),
    (OrderConflictError, 503),
)


def _error_status(exc: OrderPlacementError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


@orders_bp.post("")
def place_order_route():
    """
    Place a single-line order.

    201 with the order on success; 4xx/503 with a typed rejection otherwise.
    """
    try:
        data = validate_payload(payload=request.get_json(silent=True), policy=PLACE_ORDER_POLICY)
    except ValidationError as e:
        return jsonify({"error": str(e), "reason": InvalidOrderError.reason, "details": {}}), 400

    try:
        placed = order_service.place_order(
            data["order_id"],
            data["customer_id"],
            data["seller_id"],
            data["order_item_id"],
            data["product_id"],
            data["quantity"],
            warehouse_id=data.get("warehouse_id"),
        )
        return jsonify(placed.to_dict()), 201

    except OrderPlacementError as e:
        return jsonify(e.to_dict()), _error_status(e)
    except Exception:
        current_app.logger.exception("Failed to place order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>")
def get_order_route(order_id: int):
    try:
        return jsonify(order_service.get_order(order_id)), 200
    except EntityNotFoundError as e:
        return jsonify(e.to_dict()), 404
