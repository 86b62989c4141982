"""
Pytest fixtures for KM dashboard backend tests.

Provides test database setup, one user per role, and auth headers.
"""

import pytest
from kmdash import create_app
from kmdash.extensions import db
from kmdash.services import auth_service


TEST_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
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


def _make_user(name: str, email: str, role: str):
    return auth_service.create_user(name=name, email=email, password=TEST_PASSWORD, role=role)


@pytest.fixture(scope='function')
def admin_user(db_session):
    return _make_user("Admin KM", "admin@konveksi.test", "admin")


@pytest.fixture(scope='function')
def manager_user(db_session):
    return _make_user("Siti Manager", "manager@konveksi.test", "manager")


@pytest.fixture(scope='function')
def staff_user(db_session):
    return _make_user("Ahmad Staff", "staff@konveksi.test", "staff")


def get_auth_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, admin_user.email))


@pytest.fixture(scope='function')
def manager_headers(client, manager_user):
    return auth_headers(get_auth_token(client, manager_user.email))


@pytest.fixture(scope='function')
def staff_headers(client, staff_user):
    return auth_headers(get_auth_token(client, staff_user.email))
