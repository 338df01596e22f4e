"""
Pytest fixtures for NumberFlow backend tests.

Provides the test application (in-memory SQLite, sweeper thread off),
a per-test clean database, admin/employee accounts with bearer tokens,
and a number factory.
"""

from datetime import datetime

import pytest

from numberflow import create_app
from numberflow.extensions import db
from numberflow.services import auth_service, number_service, session_service


ADMIN_EMAIL = "admin@numberflow.test"
EMPLOYEE_EMAIL = "ramesh@numberflow.test"
PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RTS_SWEEP_ENABLED': False,
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
def admin_user(db_session):
    """First account created, so it becomes the admin."""
    return auth_service.create_user(ADMIN_EMAIL, PASSWORD, "Admin User")


@pytest.fixture(scope='function')
def employee_user(db_session, admin_user):
    return auth_service.create_user(EMPLOYEE_EMAIL, PASSWORD, "Ramesh", role="employee")


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_token(admin_user):
    _, token = session_service.create_session(admin_user.id)
    return token


@pytest.fixture(scope='function')
def employee_token(employee_user):
    _, token = session_service.create_session(employee_user.id)
    return token


@pytest.fixture(scope='function')
def admin_headers(admin_token):
    return auth_headers(admin_token)


@pytest.fixture(scope='function')
def employee_headers(employee_token):
    return auth_headers(employee_token)


@pytest.fixture(scope='function')
def make_number(admin_user):
    """
    Factory for inventory numbers added through the service layer.

    Defaults to a Non-RTS Prepaid number owned by the admin.
    """
    def _make(mobile: str, user=None, **overrides):
        data = {
            "mobile": mobile,
            "status": "Non-RTS",
            "purchase_price": 100.0,
            "purchase_date": datetime(2024, 5, 1),
        }
        data.update(overrides)
        number, _ = number_service.add_number(user or admin_user, data)
        return number

    return _make
