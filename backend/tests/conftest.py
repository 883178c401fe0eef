"""
Pytest fixtures for Stockroom backend tests.

Provides the in-memory test app, a per-test table wipe, users of every role
with bearer headers, and small factories for catalog and inventory rows.
"""

from decimal import Decimal

import pytest

from stockroom import create_app
from stockroom.config import TestConfig
from stockroom.extensions import db
from stockroom.models import (
    Category,
    InventoryItem,
    Product,
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_USER,
    StockMovement,
    Supplier,
    User,
)
from stockroom.services.auth_service import hash_password
from stockroom.services.token_service import issue_token

TEST_PASSWORD = "secret1"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='session')
def password_hash(app):
    """One bcrypt hash shared by every fixture user (hashing is slow on purpose)."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    # Cleanup after test
    db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def make_user(db_session, password_hash):
    def _make_user(username, role=ROLE_USER, *, email=None, is_active=True, first_name=None):
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=password_hash,
            role=role,
            first_name=first_name,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope='function')
def admin_user(make_user):
    return make_user("admin", ROLE_ADMIN)


@pytest.fixture(scope='function')
def manager_user(make_user):
    return make_user("manager", ROLE_MANAGER)


@pytest.fixture(scope='function')
def regular_user(make_user):
    return make_user("user1", ROLE_USER)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return auth_headers(token_for(admin_user))


@pytest.fixture(scope='function')
def manager_headers(manager_user):
    return auth_headers(token_for(manager_user))


@pytest.fixture(scope='function')
def user_headers(regular_user):
    return auth_headers(token_for(regular_user))


@pytest.fixture(scope='function')
def headers_for(app):
    """Bearer headers for any user row."""
    def _headers_for(user):
        return auth_headers(token_for(user))

    return _headers_for


@pytest.fixture(scope='function')
def make_category(db_session):
    def _make_category(name="Electronics", description=None):
        category = Category(name=name, description=description)
        db_session.add(category)
        db_session.commit()
        return category

    return _make_category


@pytest.fixture(scope='function')
def make_supplier(db_session):
    def _make_supplier(name="Acme Supply", **fields):
        supplier = Supplier(name=name, **fields)
        db_session.add(supplier)
        db_session.commit()
        return supplier

    return _make_supplier


@pytest.fixture(scope='function')
def make_product(db_session):
    def _make_product(sku="SKU-001", name="Widget", selling_price="19.99", **fields):
        product = Product(
            sku=sku,
            name=name,
            selling_price=Decimal(selling_price),
            low_stock_threshold=fields.pop("low_stock_threshold", 0),
            **fields,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make_product


@pytest.fixture(scope='function')
def make_item(db_session):
    def _make_item(product, quantity=10, reserved_quantity=0, **fields):
        item = InventoryItem(
            product_id=product.id,
            quantity=quantity,
            reserved_quantity=reserved_quantity,
            **fields,
        )
        db_session.add(item)
        db_session.commit()
        return item

    return _make_item


@pytest.fixture(scope='function')
def make_movement(db_session):
    def _make_movement(product, user, quantity=5, movement_type="PURCHASE", item=None):
        movement = StockMovement(
            product_id=product.id,
            inventory_item_id=item.id if item else None,
            user_id=user.id,
            type=movement_type,
            quantity=quantity,
        )
        db_session.add(movement)
        db_session.commit()
        return movement

    return _make_movement


def token_for(user) -> str:
    return issue_token(user.id, user.username, user.role)


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
