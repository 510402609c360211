"""
Tests for login and token issuance.
"""
import pytest
from jose import jwt

from hospital.auth.models import User, UserRole
from hospital.config import settings
from hospital.core.audit_models import AuditLog

ALICE = {"email": "alice@example.com", "password": "secret1", "name": "Alice"}


@pytest.fixture
def registered(client):
    response = client.post("/api/auth/register", json=ALICE)
    assert response.status_code == 201
    return response.json()["user_id"]


def test_login_success(client, registered):
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret1"})
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["token_type"] == "bearer"
    assert data["role"] == "patient"
    assert data["user"] == {"id": registered, "name": "Alice", "email": "alice@example.com", "role": "patient"}

    payload = jwt.decode(data["token"], settings.secret_key, algorithms=[settings.algorithm])
    assert payload["id"] == registered
    assert payload["email"] == "alice@example.com"
    assert payload["role"] == "patient"
    assert "exp" in payload


def test_login_normalizes_email(client, registered):
    response = client.post("/api/auth/login", json={"email": "  ALICE@example.com", "password": "secret1"})
    assert response.status_code == 200


def test_login_wrong_password(client, registered):
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrongpass"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_unknown_email_is_indistinguishable(client, registered):
    """
    An unknown email and a wrong password produce the same response.
    """
    unknown = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret1"})
    wrong = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrongpass"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


def test_password_is_case_sensitive(client, registered):
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "SECRET1"})
    assert response.status_code == 401


@pytest.mark.parametrize("payload", [
    {},
    {"email": "alice@example.com"},
    {"password": "secret1"},
    {"email": "", "password": "secret1"},
    {"email": "alice@example.com", "password": ""},
])
def test_login_missing_fields(client, registered, payload):
    response = client.post("/api/auth/login", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "Email and password required"


def test_login_does_not_mutate_account(client, db, registered):
    before = db.query(User).filter(User.id == registered).one()
    snapshot = (before.email, before.password_hash, before.name, before.role, before.updated_at)

    client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret1"})
    client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrongpass"})

    db.expire_all()
    after = db.query(User).filter(User.id == registered).one()
    assert (after.email, after.password_hash, after.name, after.role, after.updated_at) == snapshot


def test_staff_roles_log_in_with_their_role(client, make_user):
    make_user("labtech@hospital.com", UserRole.LAB_TECHNICIAN, password="password123")
    response = client.post("/api/auth/login", json={"email": "labtech@hospital.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["role"] == "lab_technician"


def test_login_attempts_are_audited(client, db, registered):
    client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrongpass"})
    client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret1"})

    actions = [log.action for log in db.query(AuditLog).filter(AuditLog.action.like("USER_LOGIN%")).order_by(AuditLog.id)]
    assert actions == ["USER_LOGIN_FAILED_INVALID_CREDENTIALS", "USER_LOGIN_SUCCESS"]
