"""
Pytest fixtures for rentpos backend tests.

Provides an in-memory database, a test client, the default catalog and
signed-in admin/cashier employees.
"""

from decimal import Decimal

import pytest
from rentpos import create_app
from rentpos.extensions import db
from rentpos.models import Product, RentalProduct
from rentpos.seed import seed_catalog
from rentpos.services import employee_service

PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'LOOKUP_RETRY_BACKOFF_SECONDS': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh database contents for each test."""
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
def catalog(db_session):
    """Default products (1000-3002) and rental products (1000-1010)."""
    seed_catalog()


@pytest.fixture(scope='function')
def low_stock(db_session):
    """A product and a rental product with only a few units left."""
    product = Product(id="9000", name="Last Widget", price=Decimal("2.00"), stock=5, category="misc")
    rental = RentalProduct(id="9000", name="Rare Film", rental_price=Decimal("30.00"), stock=2, category="movie")
    db_session.add_all([product, rental])
    db_session.commit()
    return product, rental


@pytest.fixture(scope='function')
def admin(db_session):
    return employee_service.create_employee("harry_admin", "Harry Larry", PASSWORD, "Admin")


@pytest.fixture(scope='function')
def cashier(db_session):
    return employee_service.create_employee("debra_cashier", "Debra Cooper", PASSWORD, "Cashier")


@pytest.fixture(scope='function')
def admin_headers(client, admin):
    return auth_headers(get_auth_token(client, admin.username, PASSWORD))


@pytest.fixture(scope='function')
def cashier_headers(client, cashier):
    return auth_headers(get_auth_token(client, cashier.username, PASSWORD))


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for an employee."""
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
