from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_iso_date


class InventoryRecord(db.Model):
    """
    Stock count for one product in one warehouse.

    A product may have several rows (one per warehouse). Stock only goes
    down through order placement; restocking is an external workflow.

    CONCURRENCY: version_id makes every UPDATE conditional on the version
    that was read, so a lost update raises StaleDataError instead of
    silently overselling.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_inventory_stock_nonnegative"),
        db.Index("ix_inventory_product_warehouse", "product_id", "warehouse_id"),
    )

    inventory_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    product_id = db.Column(db.Integer, db.ForeignKey("product.product_id"), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    warehouse_id = db.Column(db.Integer, nullable=True)
    last_stock_date = db.Column(db.Date, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    product = db.relationship("Product", backref=db.backref("inventory_records", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<InventoryRecord id={self.inventory_id} product_id={self.product_id} "
            f"warehouse_id={self.warehouse_id} stock={self.stock}>"
        )

    def to_dict(self) -> dict:
        return {
            "inventory_id": self.inventory_id,
            "product_id": self.product_id,
            "stock": self.stock,
            "warehouse_id": self.warehouse_id,
            "last_stock_date": to_iso_date(self.last_stock_date),
            "version_id": self.version_id,
        }
