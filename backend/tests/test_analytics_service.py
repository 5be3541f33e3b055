# Overview: Pytest coverage for the read-only analytical projections.

from datetime import date

import pytest

from storefront.models import (
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
from storefront.services import analytics_service
from storefront.services.analytics_service import ReportError


def _line(order_item_id, order_id, product_id, quantity, unit_cents):
    return OrderItem(
        order_item_id=order_item_id,
        order_id=order_id,
        product_id=product_id,
        quantity=quantity,
        price_per_unit_cents=unit_cents,
        total_sale_cents=quantity * unit_cents,
    )


@pytest.fixture
def marketplace(db_session):
    """
    Two categories, three customers (one without orders), four orders:

    order 100  Ann   2026-01-15  phone x1  500.00
    order 101  Ann   2026-02-10  kite  x3   30.00
    order 102  Bob   2026-02-20  kite  x2   20.00
    order 103  Bob   2026-03-05  kite  x1   10.00
    """
    db_session.add_all([
        Category(category_id=1, category_name="electronics"),
        Category(category_id=2, category_name="toys"),
        Customer(customer_id=1, first_name="Ann", last_name="Lee", state="Texas"),
        Customer(customer_id=2, first_name="Bob", last_name="Ray", state="Texas"),
        Customer(customer_id=3, first_name="Cy", last_name="Moe", state="Ohio"),
        Seller(seller_id=1, seller_name="Acme", origin="USA"),
    ])
    db_session.flush()
    db_session.add_all([
        Product(product_id=10, product_name="Phone", price_cents=50000, cogs_cents=30000, category_id=1),
        Product(product_id=20, product_name="Kite", price_cents=1000, cogs_cents=400, category_id=2),
    ])
    db_session.flush()
    db_session.add_all([
        Order(order_id=100, order_date=date(2026, 1, 15), customer_id=1, seller_id=1, order_status="Delivered"),
        Order(order_id=101, order_date=date(2026, 2, 10), customer_id=1, seller_id=1, order_status="Delivered"),
        Order(order_id=102, order_date=date(2026, 2, 20), customer_id=2, seller_id=1, order_status="Shipped"),
        Order(order_id=103, order_date=date(2026, 3, 5), customer_id=2, seller_id=1, order_status="Placed"),
    ])
    db_session.flush()
    db_session.add_all([
        _line(1000, 100, 10, 1, 50000),
        _line(1001, 101, 20, 3, 1000),
        _line(1002, 102, 20, 2, 1000),
        _line(1003, 103, 20, 1, 1000),
        Payment(payment_id=1, order_id=100, payment_date=date(2026, 1, 15), payment_status="Payment Successed"),
        Payment(payment_id=2, order_id=101, payment_date=date(2026, 2, 10), payment_status="Payment Successed"),
        Payment(payment_id=3, order_id=102, payment_date=date(2026, 2, 20), payment_status="Payment Failed"),
        Payment(payment_id=4, order_id=103, payment_date=date(2026, 3, 5), payment_status="Pending"),
        Shipping(shipping_id=1, order_id=100, shipping_date=date(2026, 1, 20), shipping_providers="bluedart"),
        Shipping(shipping_id=2, order_id=101, shipping_date=date(2026, 2, 12), shipping_providers="dhl"),
        Shipping(shipping_id=3, order_id=102, shipping_date=date(2026, 2, 23), shipping_providers="fedex"),
        InventoryRecord(inventory_id=1, product_id=10, stock=3, warehouse_id=1),
        InventoryRecord(inventory_id=2, product_id=20, stock=50, warehouse_id=1),
    ])
    db_session.commit()
    return db_session


def test_top_selling_products(marketplace):
    result = analytics_service.top_selling_products(limit=10)

    assert [(r["product_id"], r["revenue_cents"], r["total_orders"]) for r in result["rows"]] == [
        (10, 50000, 1),
        (20, 6000, 3),
    ]
    assert len(analytics_service.top_selling_products(limit=1)["rows"]) == 1


def test_top_selling_products_rejects_bad_limit(db_session):
    with pytest.raises(ReportError):
        analytics_service.top_selling_products(limit=0)


def test_revenue_by_category(marketplace):
    result = analytics_service.revenue_by_category()

    assert result["total_revenue_cents"] == 56000
    assert [(r["category_name"], r["revenue_cents"], r["percentage_contribution"]) for r in result["rows"]] == [
        ("electronics", 50000, 89.29),
        ("toys", 6000, 10.71),
    ]


def test_average_order_value(marketplace):
    assert analytics_service.average_order_value()["rows"] == []

    rows = analytics_service.average_order_value(min_orders=1)["rows"]
    assert [(r["full_name"], r["order_count"], r["average_order_value_cents"]) for r in rows] == [
        ("Ann Lee", 2, 26500),
        ("Bob Ray", 2, 1500),
    ]


def test_monthly_sales_trend(marketplace):
    result = analytics_service.monthly_sales_trend(months=20, as_of="2026-03-31")

    assert result["as_of"] == "2026-03-31"
    assert [
        (r["year"], r["month"], r["revenue_cents"], r["previous_month_revenue_cents"])
        for r in result["rows"]
    ] == [
        (2026, 1, 50000, None),
        (2026, 2, 5000, 50000),
        (2026, 3, 1000, 5000),
    ]


def test_monthly_sales_trend_window(marketplace):
    result = analytics_service.monthly_sales_trend(months=1, as_of="2026-03-31")

    assert result["start"] == "2026-02-28"
    assert [r["month"] for r in result["rows"]] == [3]


@pytest.mark.parametrize("kwargs", [{"months": 0}, {"as_of": "31/03/2026"}])
def test_monthly_sales_trend_rejects_bad_parameters(db_session, kwargs):
    with pytest.raises(ReportError):
        analytics_service.monthly_sales_trend(**kwargs)


def test_customers_without_orders(marketplace):
    rows = analytics_service.customers_without_orders()["rows"]

    assert [r["customer_id"] for r in rows] == [3]


def test_least_selling_category_by_state(marketplace):
    rows = analytics_service.least_selling_category_by_state()["rows"]

    assert rows == [{"state": "Texas", "category_name": "toys", "revenue_cents": 6000}]


def test_customer_lifetime_value(marketplace):
    rows = analytics_service.customer_lifetime_value()["rows"]

    assert [(r["customer_id"], r["lifetime_value_cents"], r["rank"]) for r in rows] == [
        (1, 53000, 1),
        (2, 3000, 2),
    ]


def test_low_stock_alerts(marketplace):
    rows = analytics_service.low_stock_alerts()["rows"]
    assert [(r["inventory_id"], r["stock"]) for r in rows] == [(1, 3)]

    assert len(analytics_service.low_stock_alerts(threshold=100)["rows"]) == 2


def test_shipping_delays(marketplace):
    result = analytics_service.shipping_delays()

    assert result["min_days"] == 3
    assert [(r["order_id"], r["shipped_after_days"]) for r in result["rows"]] == [(100, 5)]

    relaxed = analytics_service.shipping_delays(min_days=1)
    assert [r["order_id"] for r in relaxed["rows"]] == [100, 101, 102]


def test_payment_status_breakdown(marketplace):
    result = analytics_service.payment_status_breakdown()

    assert result["total_payments"] == 4
    assert [(r["payment_status"], r["total_count"], r["percentage_breakdown"]) for r in result["rows"]] == [
        ("Payment Successed", 2, 50.0),
        ("Payment Failed", 1, 25.0),
        ("Pending", 1, 25.0),
    ]


def test_projections_on_empty_database(db_session):
    for name, projection in analytics_service.PROJECTIONS.items():
        result = projection()
        assert result["rows"] == [], name
