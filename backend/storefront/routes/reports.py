from flask import Blueprint, jsonify, request

from storefront.services import analytics_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _run(projection, **kwargs):
    try:
        return jsonify(projection(**kwargs)), 200
    except analytics_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/top-products")
def top_products_report():
    limit = request.args.get("limit", 10, type=int)
    return _run(analytics_service.top_selling_products, limit=limit)


@reports_bp.get("/revenue-by-category")
def revenue_by_category_report():
    return _run(analytics_service.revenue_by_category)


@reports_bp.get("/average-order-value")
def average_order_value_report():
    min_orders = request.args.get("min_orders", 5, type=int)
    return _run(analytics_service.average_order_value, min_orders=min_orders)


@reports_bp.get("/monthly-sales")
def monthly_sales_report():
    months = request.args.get("months", 20, type=int)
    as_of = request.args.get("as_of")
    return _run(analytics_service.monthly_sales_trend, months=months, as_of=as_of)


@reports_bp.get("/customers-without-orders")
def customers_without_orders_report():
    return _run(analytics_service.customers_without_orders)


@reports_bp.get("/least-selling-categories")
def least_selling_categories_report():
    return _run(analytics_service.least_selling_category_by_state)


@reports_bp.get("/customer-lifetime-value")
def customer_lifetime_value_report():
    return _run(analytics_service.customer_lifetime_value)


@reports_bp.get("/low-stock")
def low_stock_report():
    threshold = request.args.get("threshold", type=int)
    return _run(analytics_service.low_stock_alerts, threshold=threshold)


@reports_bp.get("/shipping-delays")
def shipping_delays_report():
    min_days = request.args.get("min_days", type=int)
    return _run(analytics_service.shipping_delays, min_days=min_days)


@reports_bp.get("/payment-status")
def payment_status_report():
    return _run(analytics_service.payment_status_breakdown)
