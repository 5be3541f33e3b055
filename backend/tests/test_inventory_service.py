# Overview: Pytest coverage for stock reads and the reserve-or-reject step.

import pytest

from storefront.models import InventoryRecord
from storefront.services import inventory_service


def test_available_stock_sums_warehouses(db_session, product, add_stock):
    add_stock(product.product_id, 5, warehouse_id=1)
    add_stock(product.product_id, 10, warehouse_id=2)

    assert inventory_service.get_available_stock(product.product_id) == 15
    assert inventory_service.get_available_stock(product.product_id, warehouse_id=2) == 10
    assert inventory_service.get_available_stock(product.product_id, warehouse_id=9) == 0


def test_reserve_drains_warehouses_in_order(db_session, product, add_stock):
    first = add_stock(product.product_id, 5, warehouse_id=1)
    second = add_stock(product.product_id, 10, warehouse_id=2)

    reservation = inventory_service.check_and_reserve(product.product_id, 12)
    db_session.commit()

    assert reservation.reserved is True
    assert reservation.available == 15
    assert [(a.inventory_id, a.quantity) for a in reservation.allocations] == [(first, 5), (second, 7)]

    db_session.expire_all()
    assert db_session.get(InventoryRecord, first).stock == 0
    assert db_session.get(InventoryRecord, second).stock == 3


def test_rows_without_warehouse_are_drained_last(db_session, product, add_stock):
    unassigned = add_stock(product.product_id, 4, warehouse_id=None)
    assigned = add_stock(product.product_id, 4, warehouse_id=3)

    reservation = inventory_service.check_and_reserve(product.product_id, 6)
    db_session.commit()

    assert [a.inventory_id for a in reservation.allocations] == [assigned, unassigned]
    db_session.expire_all()
    assert db_session.get(InventoryRecord, assigned).stock == 0
    assert db_session.get(InventoryRecord, unassigned).stock == 2


def test_warehouse_specific_shortage_leaves_stock_alone(db_session, product, add_stock, stock_of):
    add_stock(product.product_id, 5, warehouse_id=1)
    add_stock(product.product_id, 10, warehouse_id=2)

    reservation = inventory_service.check_and_reserve(product.product_id, 6, warehouse_id=1)
    db_session.commit()

    assert reservation.reserved is False
    assert reservation.available == 5
    assert reservation.allocations == []
    assert stock_of(product.product_id) == 15


def test_exact_stock_is_reservable(db_session, product, add_stock, stock_of):
    add_stock(product.product_id, 40)

    reservation = inventory_service.check_and_reserve(product.product_id, 40)
    db_session.commit()

    assert reservation.reserved is True
    assert stock_of(product.product_id) == 0


def test_product_without_rows(db_session, product):
    reservation = inventory_service.check_and_reserve(product.product_id, 1)

    assert reservation.reserved is False
    assert reservation.available == 0


@pytest.mark.parametrize("quantity", [0, -1])
def test_non_positive_quantity_is_refused(db_session, product, add_stock, quantity):
    add_stock(product.product_id, 5)

    with pytest.raises(ValueError):
        inventory_service.check_and_reserve(product.product_id, quantity)


def test_inventory_summary(db_session, product, add_stock):
    add_stock(product.product_id, 7, warehouse_id=2)
    add_stock(product.product_id, 3, warehouse_id=1)

    summary = inventory_service.get_inventory_summary(product.product_id)

    assert summary["total_stock"] == 10
    assert [w["warehouse_id"] for w in summary["warehouses"]] == [1, 2]
    assert summary["warehouses"][0]["last_stock_date"] is None
