# Overview: Concurrent order placement against a file-backed database; checks for overselling.

"""
Concurrency tests.

Every worker thread gets its own app context (and so its own session and
connection) against a temporary SQLite file, the way concurrent requests
would hit the service.
"""

import threading

import pytest

from storefront import create_app
from storefront.extensions import db
from storefront.models import Category, Customer, Seller, Product, InventoryRecord, Order, OrderItem
from storefront.services import order_service
from storefront.services.order_service import InsufficientStockError, OrderPlacementError


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'concurrency.db'}",
        'ORDER_RETRY_ATTEMPTS': 5,
        'ORDER_RETRY_BACKOFF': 0.01,
    })

    with app.app_context():
        db.create_all()
        db.session.add(Category(category_id=1, category_name="toys"))
        db.session.add(Customer(customer_id=2, first_name="Jane", last_name="Doe", state="Ohio"))
        db.session.add(Seller(seller_id=5, seller_name="Acme", origin="USA"))
        db.session.add(Product(product_id=1, product_name="Kite", price_cents=1000, category_id=1))
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def _seed_stock(app, *rows):
    with app.app_context():
        for inventory_id, warehouse_id, stock in rows:
            db.session.add(InventoryRecord(
                inventory_id=inventory_id, product_id=1, stock=stock, warehouse_id=warehouse_id,
            ))
        db.session.commit()


def _run_concurrently(app, requests):
    """Place every (order_id, quantity) request from its own thread."""
    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(len(requests))

    def worker(order_id, quantity):
        with app.app_context():
            try:
                barrier.wait()
                placed = order_service.place_order(order_id, 2, 5, order_id + 1, 1, quantity)
                with lock:
                    results.append(("placed", placed.order_id))
            except OrderPlacementError as exc:
                with lock:
                    results.append((exc.reason, order_id))
            except Exception as exc:
                with lock:
                    results.append(("error", repr(exc)))
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=req) for req in requests]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def _ledger_state(app):
    with app.app_context():
        stock = db.session.query(db.func.sum(InventoryRecord.stock)).scalar()
        min_row = db.session.query(db.func.min(InventoryRecord.stock)).scalar()
        orders = db.session.query(Order).count()
        items = db.session.query(OrderItem).all()
        sold = sum(i.quantity for i in items)
        return stock, min_row, orders, len(items), sold


def test_no_overselling_single_units(file_app):
    _seed_stock(file_app, (1, 1, 5))

    results = _run_concurrently(file_app, [(100 + 10 * n, 1) for n in range(12)])

    placed = [r for r in results if r[0] == "placed"]
    rejected = [r for r in results if r[0] != "placed"]
    assert len(placed) == 5
    assert [r[0] for r in rejected] == [InsufficientStockError.reason] * 7

    stock, min_row, orders, item_count, sold = _ledger_state(file_app)
    assert min_row >= 0
    assert stock == 5 - len(placed)
    assert orders == item_count == len(placed)
    assert sold == len(placed)


def test_two_large_orders_against_limited_stock(file_app):
    _seed_stock(file_app, (1, 1, 40))

    results = _run_concurrently(file_app, [(200, 30), (300, 30)])

    placed = [r for r in results if r[0] == "placed"]
    rejected = [r for r in results if r[0] == InsufficientStockError.reason]
    assert len(placed) == 1
    assert len(rejected) == 1

    stock, min_row, orders, item_count, sold = _ledger_state(file_app)
    assert stock == 10
    assert min_row >= 0
    assert orders == item_count == 1
    assert sold == 30


def test_reservations_spanning_warehouses(file_app):
    _seed_stock(file_app, (1, 1, 3), (2, 2, 4))

    results = _run_concurrently(file_app, [(400 + 10 * n, 2) for n in range(6)])

    placed = [r for r in results if r[0] == "placed"]
    assert len(placed) == 3
    assert [r[0] for r in results if r[0] != "placed"] == [InsufficientStockError.reason] * 3

    stock, min_row, orders, item_count, sold = _ledger_state(file_app)
    assert min_row >= 0
    assert sold == 2 * len(placed)
    assert stock == 7 - sold
    assert orders == item_count == len(placed)
