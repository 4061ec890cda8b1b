"""
Pytest fixtures for storefront backend tests.

Provides test database setup, user/role fixtures, auth headers and test client.
"""

import pytest

from storefront import create_app
from storefront.config import TestConfig
from storefront.extensions import db, get_container
from storefront.permissions import Role
from storefront.services.auth_service import hash_password

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    # Cleanup after test
    db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def container(app, db_session):
    return get_container()


@pytest.fixture(scope='function')
def make_user(container):
    """Factory: create a user directly through the repository."""
    counter = {"n": 0}

    def _make(role=Role.USER, email=None, name="Test User", password=DEFAULT_PASSWORD, is_active=True):
        counter["n"] += 1
        email = email or f"{Role(role).value}{counter['n']}@example.com"
        user = container.users.create(
            {"name": name, "email": email},
            password_hash=hash_password(password, rounds=4),
            role=role,
        )
        if not is_active:
            container.users.deactivate(user.id)
        return user

    return _make


@pytest.fixture(scope='function')
def headers_for(container):
    """Factory: Authorization header carrying a fresh access token for `user`."""
    def _headers(user):
        token = container.tokens.issue_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user(Role.ADMIN, email="admin@example.com", name="Admin")


@pytest.fixture(scope='function')
def manager(make_user):
    return make_user(Role.MANAGER, email="manager@example.com", name="Manager")


@pytest.fixture(scope='function')
def customer(make_user):
    return make_user(Role.USER, email="customer@example.com", name="Customer")


@pytest.fixture(scope='function')
def other_customer(make_user):
    return make_user(Role.USER, email="other@example.com", name="Other Customer")


@pytest.fixture(scope='function')
def admin_headers(admin, headers_for):
    return headers_for(admin)


@pytest.fixture(scope='function')
def manager_headers(manager, headers_for):
    return headers_for(manager)


@pytest.fixture(scope='function')
def customer_headers(customer, headers_for):
    return headers_for(customer)


@pytest.fixture(scope='function')
def other_headers(other_customer, headers_for):
    return headers_for(other_customer)


@pytest.fixture(scope='function')
def category(container):
    return container.categories.create({"name": "Herbal Teas", "description": "Loose leaf"})


@pytest.fixture(scope='function')
def products(container, category):
    """Three products: two in `category`, one uncategorized."""
    return [
        container.products.create({"name": "Chamomile Tea", "price": "15.99", "stock": 100,
                                    "category_id": category.id}),
        container.products.create({"name": "Green Tea", "price": "12.99", "stock": 150,
                                    "category_id": category.id}),
        container.products.create({"name": "Lavender Oil", "price": "29.99", "stock": 50}),
    ]
