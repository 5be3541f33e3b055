from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_iso_date

ORDER_STATUS_PLACED = "Placed"
ORDER_STATUS_IN_PROGRESS = "InProgress"
ORDER_STATUS_SHIPPED = "Shipped"
ORDER_STATUS_DELIVERED = "Delivered"
ORDER_STATUS_RETURNED = "Returned"
ORDER_STATUS_CANCELLED = "Cancelled"

ORDER_STATUSES = (
    ORDER_STATUS_PLACED,
    ORDER_STATUS_IN_PROGRESS,
    ORDER_STATUS_SHIPPED,
    ORDER_STATUS_DELIVERED,
    ORDER_STATUS_RETURNED,
    ORDER_STATUS_CANCELLED,
)


class Order(db.Model):
    """
    Order header.

    Created exactly once by order placement together with its line item.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_customer_date", "customer_id", "order_date"),
        db.Index("ix_orders_seller", "seller_id"),
    )

    order_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    order_date = db.Column(db.Date, nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customer.customer_id"), nullable=False)
    seller_id = db.Column(db.Integer, db.ForeignKey("seller.seller_id"), nullable=False)
    order_status = db.Column(db.String(15), nullable=False, default=ORDER_STATUS_PLACED, index=True)

    customer = db.relationship("Customer", backref=db.backref("orders", lazy=True))
    seller = db.relationship("Seller", backref=db.backref("orders", lazy=True))

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "order_date": to_iso_date(self.order_date),
            "customer_id": self.customer_id,
            "seller_id": self.seller_id,
            "order_status": self.order_status,
        }


class OrderItem(db.Model):
    """Individual line item; unit price is a snapshot taken at placement."""
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        db.Index("ix_order_items_order", "order_id"),
        db.Index("ix_order_items_product", "product_id"),
    )

    order_item_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.order_id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("product.product_id"), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    price_per_unit_cents = db.Column(db.Integer, nullable=False)
    total_sale_cents = db.Column(db.Integer, nullable=False)

    order = db.relationship("Order", backref=db.backref("items", lazy=True))
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "order_item_id": self.order_item_id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price_per_unit_cents": self.price_per_unit_cents,
            "total_sale_cents": self.total_sale_cents,
        }
