# Overview: Flask API routes for catalog and stock lookups.

from flask import Blueprint, request, jsonify

from ..services import catalog_service, inventory_service
from ..services.catalog_service import NotFoundError


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


@catalog_bp.get("/products")
def list_products_route():
    category_id = request.args.get("category_id", type=int)
    limit = request.args.get("limit", 200, type=int)
    if limit <= 0:
        return jsonify({"error": "limit must be > 0"}), 400

    products = catalog_service.list_products(category_id=category_id, limit=limit)
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@catalog_bp.get("/products/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = catalog_service.get_product(product_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({
        "product": catalog_service.product_summary(product),
        "inventory": inventory_service.get_inventory_summary(product_id),
    }), 200


@catalog_bp.get("/inventory/<int:product_id>")
def get_inventory_route(product_id: int):
    """Stock per warehouse plus the total a reservation would draw from."""
    try:
        catalog_service.get_product(product_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    summary = inventory_service.get_inventory_summary(product_id)
    warehouse_id = request.args.get("warehouse_id", type=int)
    if warehouse_id is not None:
        summary["warehouse_id"] = warehouse_id
        summary["available"] = inventory_service.get_available_stock(product_id, warehouse_id)
    return jsonify(summary), 200
