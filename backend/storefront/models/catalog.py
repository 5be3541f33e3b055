from __future__ import annotations

from ..extensions import db


class Category(db.Model):
    __tablename__ = "category"

    category_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    category_name = db.Column(db.String(20), nullable=True)

    def to_dict(self) -> dict:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
        }


class Product(db.Model):
    """
    Catalog product.

    Prices are authoritative in cents. Order lines copy price_cents at
    placement time, so later price changes never touch recorded sales.
    """
    __tablename__ = "product"
    __table_args__ = (
        db.CheckConstraint("price_cents >= 0", name="ck_product_price_nonnegative"),
        db.Index("ix_product_category", "category_id"),
    )

    product_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    product_name = db.Column(db.String(50), nullable=False)

    # Selling price and cost of goods sold
    price_cents = db.Column(db.Integer, nullable=False)
    cogs_cents = db.Column(db.Integer, nullable=True)

    category_id = db.Column(db.Integer, db.ForeignKey("category.category_id"), nullable=True)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.product_id} name={self.product_name!r} price_cents={self.price_cents}>"

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price_cents": self.price_cents,
            "cogs_cents": self.cogs_cents,
            "category_id": self.category_id,
        }
