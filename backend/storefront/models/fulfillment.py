from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_iso_date


class Payment(db.Model):
    """Payment outcome recorded by the payment workflow (read-only here)."""
    __tablename__ = "payment"

    payment_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.order_id"), nullable=False, index=True)
    payment_date = db.Column(db.Date, nullable=True)
    payment_status = db.Column(db.String(25), nullable=True, index=True)

    order = db.relationship("Order", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "payment_id": self.payment_id,
            "order_id": self.order_id,
            "payment_date": to_iso_date(self.payment_date),
            "payment_status": self.payment_status,
        }


class Shipping(db.Model):
    """Shipment record; return_date is set when the parcel came back."""
    __tablename__ = "shipping"

    shipping_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.order_id"), nullable=False, index=True)
    shipping_date = db.Column(db.Date, nullable=True)
    return_date = db.Column(db.Date, nullable=True)
    shipping_providers = db.Column(db.String(15), nullable=True)
    delivery_status = db.Column(db.String(15), nullable=True)

    order = db.relationship("Order", backref=db.backref("shipments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "shipping_id": self.shipping_id,
            "order_id": self.order_id,
            "shipping_date": to_iso_date(self.shipping_date),
            "return_date": to_iso_date(self.return_date),
            "shipping_providers": self.shipping_providers,
            "delivery_status": self.delivery_status,
        }
