"""
Test configuration for the hospital management backend and portal client.
"""
import os

# Settings are read at import time, so the environment must be ready first
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)
os.environ.pop("BOOTSTRAP_ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hospital.database import Base, get_db
from hospital.main import app
from hospital.auth.models import User, UserRole
from hospital.core.security import hash_password, create_access_token

# Test database URL
TEST_DATABASE_URL = "sqlite://"

# Create test database engine
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    # Override the get_db dependency
    app.dependency_overrides[get_db] = override_get_db

    # Create test client
    with TestClient(app) as client:
        yield client

    # Remove dependency override
    app.dependency_overrides = {}


@pytest.fixture
def make_user(db):
    """
    Insert a user directly, bypassing the API.
    """
    def _make_user(email, role, password="password123", name="Test User"):
        user = User(email=email, password_hash=hash_password(password), name=name, role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def headers_for():
    """
    Build a bearer Authorization header for a user.
    """
    def _headers_for(user):
        token = create_access_token({"id": user.id, "email": user.email, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}
    return _headers_for


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@hospital.com", UserRole.ADMIN, name="Admin")


@pytest.fixture
def admin_headers(admin_user, headers_for):
    return headers_for(admin_user)
