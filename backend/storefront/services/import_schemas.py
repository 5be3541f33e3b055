from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from ..extensions import db
from ..models import (
    Category,
    Customer,
    InventoryRecord,
    Order,
    OrderItem,
    Payment,
    Product,
    Seller,
    Shipping,
)
from ..models.orders import ORDER_STATUSES
from ..validation import MAX_INTEGER

_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%m/%d/%Y", "%d/%m/%Y")

_STATUS_LOOKUP = {s.lower(): s for s in ORDER_STATUSES}
_STATUS_LOOKUP["in progress"] = "InProgress"
_STATUS_LOOKUP["in_progress"] = "InProgress"


def _to_decimal(text: str) -> Decimal:
    number = Decimal(text)
    if not number.is_finite():
        raise ValueError(f"not a finite number: {text!r}")
    return number


def _checked_int(number: Decimal, text: str) -> int:
    if number.adjusted() > 18 or abs(int(number)) > MAX_INTEGER:
        raise ValueError(f"number out of range: {text!r}")
    return int(number)


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    number = _to_decimal(text)
    # "2.0" is fine, "2.7" is not
    if number != number.to_integral_value():
        raise ValueError(f"not a whole number: {text!r}")
    return _checked_int(number, text)


def _to_cents(value: Any) -> int | None:
    if value is None or value == "":
        return None
    text = str(value).strip().replace("$", "").replace(",", "")
    if not text:
        return None
    cents = (_to_decimal(text) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return _checked_int(cents, text)


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def _to_date(value: Any) -> date | None:
    text = _to_text(value)
    if text is None:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognised date: {text!r}")


def _exists(model, key: int | None) -> bool:
    return key is not None and db.session.get(model, key) is not None


class BaseImportSchema:
    """One CSV file mapped onto one table, upserted by primary key."""
    filename: str = ""
    model = None
    primary_key: str = ""

    def normalize_row(self, raw_row: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def validate_row(self, normalized_row: dict[str, Any]) -> list[str]:
        errors: list[str] = []
        if normalized_row.get(self.primary_key) is None:
            errors.append(f"{self.primary_key} is required")

        # SQLite ignores VARCHAR lengths, other databases reject the flush
        columns = self.model.__table__.c
        for key, value in normalized_row.items():
            if not isinstance(value, str) or key not in columns:
                continue
            length = getattr(columns[key].type, "length", None)
            if length is not None and len(value) > length:
                errors.append(f"{key} longer than {length} characters")
        return errors

    def post_row(self, normalized_row: dict[str, Any]) -> bool:
        """Insert or update the row. Returns True when a new row was created."""
        key = normalized_row[self.primary_key]
        obj = db.session.get(self.model, key)
        created = obj is None
        if created:
            obj = self.model(**normalized_row)
            db.session.add(obj)
        else:
            for k, v in normalized_row.items():
                setattr(obj, k, v)
        return created


class CategorySchema(BaseImportSchema):
    filename = "category.csv"
    model = Category
    primary_key = "category_id"

    def normalize_row(self, raw_row):
        return {
            "category_id": _to_int(raw_row.get("category_id")),
            "category_name": _to_text(raw_row.get("category_name")),
        }


class CustomerSchema(BaseImportSchema):
    filename = "customers.csv"
    model = Customer
    primary_key = "customer_id"

    def normalize_row(self, raw_row):
        return {
            "customer_id": _to_int(raw_row.get("customer_id")),
            "first_name": _to_text(raw_row.get("first_name")),
            "last_name": _to_text(raw_row.get("last_name")),
            "state": _to_text(raw_row.get("state")),
            "address": _to_text(raw_row.get("address")) or "xxxx",
        }


class SellerSchema(BaseImportSchema):
    filename = "sellers.csv"
    model = Seller
    primary_key = "seller_id"

    def normalize_row(self, raw_row):
        return {
            "seller_id": _to_int(raw_row.get("seller_id")),
            "seller_name": _to_text(raw_row.get("seller_name")),
            "origin": _to_text(raw_row.get("origin")),
        }


class ProductSchema(BaseImportSchema):
    filename = "products.csv"
    model = Product
    primary_key = "product_id"

    def normalize_row(self, raw_row):
        return {
            "product_id": _to_int(raw_row.get("product_id")),
            "product_name": _to_text(raw_row.get("product_name")),
            "price_cents": _to_cents(raw_row.get("price")),
            "cogs_cents": _to_cents(raw_row.get("cogs")),
            "category_id": _to_int(raw_row.get("category_id")),
        }

    def validate_row(self, normalized_row):
        errors = super().validate_row(normalized_row)
        if not normalized_row.get("product_name"):
            errors.append("product_name is required")
        price = normalized_row.get("price_cents")
        if price is None:
            errors.append("price is required")
        elif price < 0:
            errors.append("price must be >= 0")
        category_id = normalized_row.get("category_id")
        if category_id is not None and not _exists(Category, category_id):
            errors.append(f"category {category_id} not found")
        return errors


class OrderSchema(BaseImportSchema):
    filename = "orders.csv"
    model = Order
    primary_key = "order_id"

    def normalize_row(self, raw_row):
        status = _to_text(raw_row.get("order_status"))
        return {
            "order_id": _to_int(raw_row.get("order_id")),
            "order_date": _to_date(raw_row.get("order_date")),
            "customer_id": _to_int(raw_row.get("customer_id")),
            "seller_id": _to_int(raw_row.get("seller_id")),
            "order_status": _STATUS_LOOKUP.get(status.lower(), status) if status else None,
        }

    def validate_row(self, normalized_row):
        errors = super().validate_row(normalized_row)
        if normalized_row.get("order_date") is None:
            errors.append("order_date is required")
        if normalized_row.get("order_status") not in ORDER_STATUSES:
            errors.append(f"unknown order_status: {normalized_row.get('order_status')!r}")
        if not _exists(Customer, normalized_row.get("customer_id")):
            errors.append(f"customer {normalized_row.get('customer_id')} not found")
        if not _exists(Seller, normalized_row.get("seller_id")):
            errors.append(f"seller {normalized_row.get('seller_id')} not found")
        return errors


class OrderItemSchema(BaseImportSchema):
    filename = "order_items.csv"
    model = OrderItem
    primary_key = "order_item_id"

    def normalize_row(self, raw_row):
        quantity = _to_int(raw_row.get("quantity"))
        unit_price = _to_cents(raw_row.get("price_per_unit"))
        total = quantity * unit_price if quantity is not None and unit_price is not None else None
        return {
            "order_item_id": _to_int(raw_row.get("order_item_id")),
            "order_id": _to_int(raw_row.get("order_id")),
            "product_id": _to_int(raw_row.get("product_id")),
            "quantity": quantity,
            "price_per_unit_cents": unit_price,
            "total_sale_cents": total,
        }

    def validate_row(self, normalized_row):
        errors = super().validate_row(normalized_row)
        quantity = normalized_row.get("quantity")
        if quantity is None or quantity <= 0:
            errors.append("quantity must be > 0")
        if normalized_row.get("price_per_unit_cents") is None:
            errors.append("price_per_unit is required")
        total = normalized_row.get("total_sale_cents")
        if total is not None and abs(total) > MAX_INTEGER:
            errors.append("total sale is out of range")
        if not _exists(Order, normalized_row.get("order_id")):
            errors.append(f"order {normalized_row.get('order_id')} not found")
        if not _exists(Product, normalized_row.get("product_id")):
            errors.append(f"product {normalized_row.get('product_id')} not found")
        return errors


class PaymentSchema(BaseImportSchema):
    filename = "payments.csv"
    model = Payment
    primary_key = "payment_id"

    def normalize_row(self, raw_row):
        return {
            "payment_id": _to_int(raw_row.get("payment_id")),
            "order_id": _to_int(raw_row.get("order_id")),
            "payment_date": _to_date(raw_row.get("payment_date")),
            "payment_status": _to_text(raw_row.get("payment_status")),
        }

    def validate_row(self, normalized_row):
        errors = super().validate_row(normalized_row)
        if not _exists(Order, normalized_row.get("order_id")):
            errors.append(f"order {normalized_row.get('order_id')} not found")
        return errors


class ShippingSchema(BaseImportSchema):
    filename = "shipping.csv"
    model = Shipping
    primary_key = "shipping_id"

    def normalize_row(self, raw_row):
        return {
            "shipping_id": _to_int(raw_row.get("shipping_id")),
            "order_id": _to_int(raw_row.get("order_id")),
            "shipping_date": _to_date(raw_row.get("shipping_date")),
            "return_date": _to_date(raw_row.get("return_date")),
            "shipping_providers": _to_text(raw_row.get("shipping_providers")),
            "delivery_status": _to_text(raw_row.get("delivery_status")),
        }

    def validate_row(self, normalized_row):
        errors = super().validate_row(normalized_row)
        if not _exists(Order, normalized_row.get("order_id")):
            errors.append(f"order {normalized_row.get('order_id')} not found")
        return errors


class InventorySchema(BaseImportSchema):
    filename = "inventory.csv"
    model = InventoryRecord
    primary_key = "inventory_id"

    def normalize_row(self, raw_row):
        return {
            "inventory_id": _to_int(raw_row.get("inventory_id")),
            "product_id": _to_int(raw_row.get("product_id")),
            "stock": _to_int(raw_row.get("stock")),
            "warehouse_id": _to_int(raw_row.get("warehouse_id")),
            "last_stock_date": _to_date(raw_row.get("last_stock_date")),
        }

    def validate_row(self, normalized_row):
        errors = super().validate_row(normalized_row)
        stock = normalized_row.get("stock")
        if stock is None or stock < 0:
            errors.append("stock must be >= 0")
        if not _exists(Product, normalized_row.get("product_id")):
            errors.append(f"product {normalized_row.get('product_id')} not found")
        return errors


# Foreign-key order: parents before children
SCHEMAS: list[BaseImportSchema] = [
    CategorySchema(),
    CustomerSchema(),
    SellerSchema(),
    ProductSchema(),
    OrderSchema(),
    OrderItemSchema(),
    PaymentSchema(),
    ShippingSchema(),
    InventorySchema(),
]
