"""
Pytest fixtures for storefront backend tests.

Provides test database setup, reference data (category, customer, seller,
product, stock) and a test client.
"""

import pytest
from storefront import create_app
from storefront.extensions import db
from storefront.models import Category, Customer, Seller, Product, InventoryRecord


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ORDER_RETRY_BACKOFF': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def category(db_session):
    category = Category(category_id=1, category_name="electronics")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def customer(db_session):
    customer = Customer(customer_id=2, first_name="Jane", last_name="Doe", state="Texas")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def seller(db_session):
    seller = Seller(seller_id=5, seller_name="Acme Traders", origin="USA")
    db_session.add(seller)
    db_session.commit()
    return seller


@pytest.fixture(scope='function')
def product(db_session, category):
    """Product P priced at 10.00."""
    product = Product(
        product_id=1,
        product_name="USB-C Charger",
        price_cents=1000,
        cogs_cents=600,
        category_id=category.category_id,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def add_stock(db_session):
    """Factory: add an inventory row and return its id."""
    def _add(product_id: int, stock: int, *, warehouse_id: int | None = 1, inventory_id: int | None = None) -> int:
        if inventory_id is None:
            inventory_id = (db_session.query(db.func.max(InventoryRecord.inventory_id)).scalar() or 0) + 1
        db_session.add(InventoryRecord(
            inventory_id=inventory_id,
            product_id=product_id,
            stock=stock,
            warehouse_id=warehouse_id,
        ))
        db_session.commit()
        return inventory_id
    return _add


@pytest.fixture(scope='function')
def stocked_product(product, customer, seller, add_stock):
    """Product P with 40 units in warehouse 1, plus customer 2 and seller 5."""
    add_stock(product.product_id, 40, warehouse_id=1)
    return product


@pytest.fixture(scope='function')
def stock_of(db_session):
    """Total stock of a product across warehouses, read fresh from the database."""
    def _stock(product_id: int) -> int:
        db_session.expire_all()
        return int(
            db_session.query(db.func.coalesce(db.func.sum(InventoryRecord.stock), 0))
            .filter(InventoryRecord.product_id == product_id)
            .scalar()
        )
    return _stock
