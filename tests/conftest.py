"""Pytest configuration and fixtures."""
import os
from datetime import datetime, timedelta

# Point the app at the test database before importing app modules
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("ADMIN_PASSWORD", None)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
import pytest
from catalog_service import crud
from catalog_service.core.database import Base, get_db
from catalog_service.core.security import generate_salt, hash_password
from catalog_service.main import app
from catalog_service.models import Book, PermissionSet, User
from catalog_service.services.catalog import CatalogCache
from catalog_service.services.permissions import PermissionMask

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct horse battery staple"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


# Override dependency
app.dependency_overrides[get_db] = override_get_db

# Create test client
client = TestClient(app=app)


class FakeClock:
    """Controllable clock; every call returns a strictly later time."""

    def __init__(self, start=datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self):
        self.now += timedelta(microseconds=1)
        return self.now

    def advance(self, delta: timedelta):
        self.now += delta


# Setup: Create and drop tables for clean testing environment
@pytest.fixture(scope="module", autouse=True)
def setup_db():
    """Create tables and a fresh catalog cache before tests and drop them after."""
    Base.metadata.create_all(bind=engine)
    app.state.catalog = CatalogCache()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """A session on the test database; books and non-admin users are removed afterwards."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.query(Book).delete()
        session.query(PermissionSet).filter(
            PermissionSet.user_id.in_(
                select(User.id).where(User.username != ADMIN_USERNAME)
            )
        ).delete(synchronize_session=False)
        session.query(User).filter(User.username != ADMIN_USERNAME).delete(synchronize_session=False)
        session.commit()
        session.close()


def make_user(session, username, password, actions=(), enabled=True):
    """Create a user directly in the store with the given permissions."""
    salt = generate_salt()
    return crud.create_user(
        session, username, salt, hash_password(password, salt), datetime(2024, 1, 1),
        enabled=enabled, granted_actions=PermissionMask.of(*actions).bits,
    )


def login_headers(username, password):
    response = client.post("/auth/login", data={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture(scope="module")
def admin_headers(setup_db):
    """Bearer headers of an enabled user holding every permission."""
    session = TestingSessionLocal()
    try:
        salt = generate_salt()
        crud.create_user(
            session, ADMIN_USERNAME, salt, hash_password(ADMIN_PASSWORD, salt), datetime(2024, 1, 1),
            enabled=True, granted_actions=PermissionMask.everything().bits,
        )
    finally:
        session.close()
    return login_headers(ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def session():
    """A session on the test database with no cleanup, for tests that share state with the app."""
    s = TestingSessionLocal()
    try:
        yield s
    finally:
        s.close()
