# Overview: Read-only catalog and directory lookups used by order placement.

from __future__ import annotations

from ..extensions import db
from ..models import Category, Customer, Product, Seller


class NotFoundError(LookupError):
    """Raised when a referenced catalog or directory entry does not exist."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("product", product_id)
    return product


def require_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("customer", customer_id)
    return customer


def require_seller(seller_id: int) -> Seller:
    seller = db.session.get(Seller, seller_id)
    if seller is None:
        raise NotFoundError("seller", seller_id)
    return seller


def list_products(*, category_id: int | None = None, limit: int = 200) -> list[Product]:
    q = db.session.query(Product)
    if category_id is not None:
        q = q.filter(Product.category_id == category_id)
    return q.order_by(Product.product_id.asc()).limit(limit).all()


def product_summary(product: Product) -> dict:
    category = db.session.get(Category, product.category_id) if product.category_id else None
    data = product.to_dict()
    data["category_name"] = category.category_name if category else None
    return data
