from __future__ import annotations

from ..extensions import db


class Customer(db.Model):
    __tablename__ = "customer"

    customer_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    first_name = db.Column(db.String(30), nullable=True)
    last_name = db.Column(db.String(20), nullable=True)
    state = db.Column(db.String(20), nullable=True, index=True)
    # Placeholder address carried over from the source dataset
    address = db.Column(db.String(5), nullable=True, default="xxxx", server_default="xxxx")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def to_dict(self) -> dict:
        return {
            "customer_id": self.customer_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "state": self.state,
            "address": self.address,
        }


class Seller(db.Model):
    __tablename__ = "seller"

    seller_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    seller_name = db.Column(db.String(25), nullable=True)
    origin = db.Column(db.String(20), nullable=True)  # Country or region of the seller

    def to_dict(self) -> dict:
        return {
            "seller_id": self.seller_id,
            "seller_name": self.seller_name,
            "origin": self.origin,
        }
