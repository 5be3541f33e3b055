# Overview: Read-only analytical projections over orders, catalog, shipping and payments.

from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy import desc, extract, func

from storefront.extensions import db
from storefront.models import (
    Category,
    Customer,
    InventoryRecord,
    Order,
    OrderItem,
    Payment,
    Product,
    Shipping,
)
from storefront.time_utils import parse_iso_date, to_iso_date, utc_today


class ReportError(Exception):
    """Raised when a projection is asked for with unusable parameters."""
    pass


def _pct(part: int, whole: int) -> float | None:
    if not whole:
        return None
    return round(part / whole * 100.0, 2)


def _full_name(first_name: str | None, last_name: str | None) -> str:
    return " ".join(p for p in (first_name, last_name) if p)


def _subtract_months(d: date, months: int) -> date:
    month_index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp the day to the target month's length
    for day in (d.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    return date(year, month, 28)


def top_selling_products(*, limit: int = 10) -> dict:
    if limit <= 0:
        raise ReportError("limit must be > 0")

    revenue = func.coalesce(func.sum(OrderItem.total_sale_cents), 0)
    rows = (
        db.session.query(
            Product.product_id.label("product_id"),
            Product.product_name.label("product_name"),
            revenue.label("revenue_cents"),
            func.count(func.distinct(Order.order_id)).label("total_orders"),
        )
        .join(OrderItem, OrderItem.product_id == Product.product_id)
        .join(Order, Order.order_id == OrderItem.order_id)
        .group_by(Product.product_id, Product.product_name)
        .order_by(desc("revenue_cents"), Product.product_id.asc())
        .limit(limit)
        .all()
    )
    return {
        "limit": limit,
        "rows": [
            {
                "product_id": row.product_id,
                "product_name": row.product_name,
                "revenue_cents": int(row.revenue_cents or 0),
                "total_orders": int(row.total_orders or 0),
            }
            for row in rows
        ],
    }


def revenue_by_category() -> dict:
    total_revenue = int(
        db.session.query(func.coalesce(func.sum(OrderItem.total_sale_cents), 0)).scalar() or 0
    )

    revenue = func.coalesce(func.sum(OrderItem.total_sale_cents), 0)
    rows = (
        db.session.query(
            Category.category_id.label("category_id"),
            Category.category_name.label("category_name"),
            revenue.label("revenue_cents"),
        )
        .select_from(Product)
        .join(OrderItem, OrderItem.product_id == Product.product_id)
        .outerjoin(Category, Category.category_id == Product.category_id)
        .group_by(Category.category_id, Category.category_name)
        .order_by(desc("revenue_cents"))
        .all()
    )
    return {
        "total_revenue_cents": total_revenue,
        "rows": [
            {
                "category_id": row.category_id,
                "category_name": row.category_name,
                "revenue_cents": int(row.revenue_cents or 0),
                "percentage_contribution": _pct(int(row.revenue_cents or 0), total_revenue),
            }
            for row in rows
        ],
    }


def average_order_value(*, min_orders: int = 5) -> dict:
    """Customers with more than `min_orders` orders and their average order value."""
    order_count = func.count(func.distinct(Order.order_id))
    rows = (
        db.session.query(
            Customer.customer_id.label("customer_id"),
            Customer.first_name.label("first_name"),
            Customer.last_name.label("last_name"),
            order_count.label("order_count"),
            func.coalesce(func.sum(OrderItem.total_sale_cents), 0).label("revenue_cents"),
        )
        .join(Order, Order.customer_id == Customer.customer_id)
        .join(OrderItem, OrderItem.order_id == Order.order_id)
        .group_by(Customer.customer_id, Customer.first_name, Customer.last_name)
        .having(order_count > min_orders)
        .all()
    )

    out = []
    for row in rows:
        orders = int(row.order_count)
        revenue_cents = int(row.revenue_cents or 0)
        out.append(
            {
                "customer_id": row.customer_id,
                "full_name": _full_name(row.first_name, row.last_name),
                "order_count": orders,
                # nearest-cent rounding (half-up)
                "average_order_value_cents": (revenue_cents + orders // 2) // orders,
            }
        )
    out.sort(key=lambda r: (-r["average_order_value_cents"], r["customer_id"]))
    return {"min_orders": min_orders, "rows": out}


def monthly_sales_trend(*, months: int = 20, as_of: str | None = None) -> dict:
    """Monthly revenue for the trailing window, each month paired with the one before."""
    if months <= 0:
        raise ReportError("months must be > 0")
    try:
        as_of_date = parse_iso_date(as_of) if as_of else utc_today()
    except ValueError:
        raise ReportError("as_of must be an ISO-8601 date")
    start = _subtract_months(as_of_date, months)

    year = extract("year", Order.order_date)
    month = extract("month", Order.order_date)
    rows = (
        db.session.query(
            year.label("year"),
            month.label("month"),
            func.coalesce(func.sum(OrderItem.total_sale_cents), 0).label("revenue_cents"),
        )
        .select_from(Order)
        .join(OrderItem, OrderItem.order_id == Order.order_id)
        .filter(Order.order_date >= start, Order.order_date <= as_of_date)
        .group_by(year, month)
        .order_by(year, month)
        .all()
    )

    out = []
    previous = None
    for row in rows:
        current = int(row.revenue_cents or 0)
        out.append(
            {
                "year": int(row.year),
                "month": int(row.month),
                "revenue_cents": current,
                "previous_month_revenue_cents": previous,
            }
        )
        previous = current

    return {
        "start": to_iso_date(start),
        "as_of": to_iso_date(as_of_date),
        "rows": out,
    }


def customers_without_orders() -> dict:
    customers = (
        db.session.query(Customer)
        .outerjoin(Order, Order.customer_id == Customer.customer_id)
        .filter(Order.order_id.is_(None))
        .order_by(Customer.customer_id.asc())
        .all()
    )
    return {"rows": [c.to_dict() for c in customers]}


def least_selling_category_by_state() -> dict:
    """For each state the category with the lowest revenue; ties are all reported."""
    revenue = func.sum(OrderItem.total_sale_cents)
    ranked = (
        db.session.query(
            Customer.state.label("state"),
            Category.category_name.label("category_name"),
            revenue.label("revenue_cents"),
            func.rank().over(partition_by=Customer.state, order_by=revenue).label("rnk"),
        )
        .join(Order, Order.customer_id == Customer.customer_id)
        .join(OrderItem, OrderItem.order_id == Order.order_id)
        .join(Product, Product.product_id == OrderItem.product_id)
        .join(Category, Category.category_id == Product.category_id)
        .group_by(Customer.state, Category.category_name)
        .subquery()
    )
    rows = (
        db.session.query(ranked.c.state, ranked.c.category_name, ranked.c.revenue_cents)
        .filter(ranked.c.rnk == 1)
        .order_by(ranked.c.state, ranked.c.category_name)
        .all()
    )
    return {
        "rows": [
            {
                "state": row.state,
                "category_name": row.category_name,
                "revenue_cents": int(row.revenue_cents or 0),
            }
            for row in rows
        ]
    }


def customer_lifetime_value() -> dict:
    revenue = func.sum(OrderItem.total_sale_cents)
    rank = func.dense_rank().over(order_by=revenue.desc())
    rows = (
        db.session.query(
            Customer.customer_id.label("customer_id"),
            Customer.first_name.label("first_name"),
            Customer.last_name.label("last_name"),
            revenue.label("revenue_cents"),
            rank.label("rnk"),
        )
        .join(Order, Order.customer_id == Customer.customer_id)
        .join(OrderItem, OrderItem.order_id == Order.order_id)
        .group_by(Customer.customer_id, Customer.first_name, Customer.last_name)
        .all()
    )
    out = [
        {
            "customer_id": row.customer_id,
            "full_name": _full_name(row.first_name, row.last_name),
            "lifetime_value_cents": int(row.revenue_cents or 0),
            "rank": int(row.rnk),
        }
        for row in rows
    ]
    out.sort(key=lambda r: (r["rank"], r["customer_id"]))
    return {"rows": out}


def low_stock_alerts(*, threshold: int | None = None) -> dict:
    if threshold is None:
        threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)

    rows = (
        db.session.query(InventoryRecord, Product)
        .join(Product, Product.product_id == InventoryRecord.product_id)
        .filter(InventoryRecord.stock < threshold)
        .order_by(InventoryRecord.stock.asc(), InventoryRecord.inventory_id.asc())
        .all()
    )
    return {
        "threshold": threshold,
        "rows": [
            {
                "inventory_id": record.inventory_id,
                "product_id": product.product_id,
                "product_name": product.product_name,
                "stock": record.stock,
                "warehouse_id": record.warehouse_id,
                "last_stock_date": to_iso_date(record.last_stock_date),
            }
            for record, product in rows
        ],
    }


def shipping_delays(*, min_days: int | None = None) -> dict:
    """Orders shipped more than `min_days` days after they were placed."""
    if min_days is None:
        min_days = current_app.config.get("SHIPPING_DELAY_DAYS", 3)

    rows = (
        db.session.query(
            Order.order_id,
            Order.order_date,
            Customer.first_name,
            Customer.last_name,
            Shipping.shipping_date,
            Shipping.shipping_providers,
        )
        .join(Customer, Customer.customer_id == Order.customer_id)
        .join(Shipping, Shipping.order_id == Order.order_id)
        .filter(Shipping.shipping_date.isnot(None))
        .order_by(Order.order_id.asc(), Shipping.shipping_id.asc())
        .all()
    )

    out = []
    for row in rows:
        # Date arithmetic stays in Python; SQLite and Postgres disagree on it
        delay_days = (row.shipping_date - row.order_date).days
        if delay_days <= min_days:
            continue
        out.append(
            {
                "order_id": row.order_id,
                "full_name": _full_name(row.first_name, row.last_name),
                "order_date": to_iso_date(row.order_date),
                "shipping_date": to_iso_date(row.shipping_date),
                "shipping_providers": row.shipping_providers,
                "shipped_after_days": delay_days,
            }
        )
    return {"min_days": min_days, "rows": out}


def payment_status_breakdown() -> dict:
    total = int(db.session.query(func.count(Payment.payment_id)).scalar() or 0)
    rows = (
        db.session.query(
            Payment.payment_status.label("payment_status"),
            func.count(Payment.payment_id).label("total_count"),
        )
        .group_by(Payment.payment_status)
        .order_by(desc("total_count"), Payment.payment_status)
        .all()
    )
    return {
        "total_payments": total,
        "rows": [
            {
                "payment_status": row.payment_status,
                "total_count": int(row.total_count),
                "percentage_breakdown": _pct(int(row.total_count), total),
            }
            for row in rows
        ],
    }


PROJECTIONS = {
    "top-products": top_selling_products,
    "revenue-by-category": revenue_by_category,
    "average-order-value": average_order_value,
    "monthly-sales": monthly_sales_trend,
    "customers-without-orders": customers_without_orders,
    "least-selling-categories": least_selling_category_by_state,
    "customer-lifetime-value": customer_lifetime_value,
    "low-stock": low_stock_alerts,
    "shipping-delays": shipping_delays,
    "payment-status": payment_status_breakdown,
}
