"""
Tests for administrator user management.
"""
import pytest

from hospital.auth.models import User, UserRole
from hospital.core.audit_models import AuditLog
from hospital.patients.models import Patient

NEW_DOCTOR = {
    "name": "Dr. Meredith Grey",
    "email": "Meredith.Grey@hospital.com",
    "role": "doctor",
    "password": "password123",
    "phone": "555-0142",
}


def test_create_staff_account(client, db, admin_headers):
    response = client.post("/api/admin/users", json=NEW_DOCTOR, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "meredith.grey@hospital.com"
    assert data["role"] == "doctor"
    assert "password" not in data and "password_hash" not in data

    user = db.query(User).filter(User.id == data["id"]).one()
    assert user.patient_profile is None
    assert db.query(AuditLog).filter(AuditLog.action == "ADMIN_USER_CREATED").count() == 1


def test_create_normalizes_role_text(client, admin_headers):
    payload = dict(NEW_DOCTOR, email="labtech@hospital.com", role="Lab Technician")
    response = client.post("/api/admin/users", json=payload, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["role"] == "lab_technician"


@pytest.mark.parametrize("role", ["admin", "patient", "janitor"])
def test_create_refuses_other_roles(client, db, admin_headers, role):
    payload = dict(NEW_DOCTOR, role=role)
    response = client.post("/api/admin/users", json=payload, headers=admin_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Admins can only register doctors, lab technicians, pharmacists, or staff"
    assert db.query(User).count() == 1


def test_create_requires_long_enough_password(client, admin_headers):
    payload = dict(NEW_DOCTOR, password="  abc  ")
    response = client.post("/api/admin/users", json=payload, headers=admin_headers)
    assert response.status_code == 400


def test_create_duplicate_email(client, admin_headers):
    client.post("/api/admin/users", json=NEW_DOCTOR, headers=admin_headers)
    response = client.post("/api/admin/users", json=dict(NEW_DOCTOR, role="staff"), headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already in use"


def test_created_account_can_log_in(client, admin_headers):
    client.post("/api/admin/users", json=NEW_DOCTOR, headers=admin_headers)
    response = client.post("/api/auth/login", json={"email": "meredith.grey@hospital.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["role"] == "doctor"


def test_list_users_is_paginated(client, admin_headers, make_user):
    for index in range(3):
        make_user(f"staff{index}@hospital.com", UserRole.STAFF)

    response = client.get("/api/admin/users?page=1&size=2", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 4
    assert data["pages"] == 2
    assert len(data["items"]) == 2
    assert data["has_next"] is True
    assert data["has_prev"] is False
    # Newest first
    assert data["items"][0]["email"] == "staff2@hospital.com"


def test_get_user(client, admin_headers, admin_user):
    response = client.get(f"/api/admin/users/{admin_user.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "admin@hospital.com"


def test_get_missing_user(client, admin_headers):
    response = client.get("/api/admin/users/999", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_update_profile_fields(client, admin_headers, make_user):
    pharmacist = make_user("pharma@hospital.com", UserRole.PHARMACIST, name="Old Name")
    response = client.put(
        f"/api/admin/users/{pharmacist.id}",
        json={"name": "  New Name ", "phone": "555-0111"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "New Name"
    assert data["phone"] == "555-0111"
    assert data["role"] == "pharmacist"


def test_update_resets_password(client, admin_headers, make_user):
    staff = make_user("staff@hospital.com", UserRole.STAFF)
    response = client.put(f"/api/admin/users/{staff.id}", json={"password": "brandnew1"}, headers=admin_headers)
    assert response.status_code == 200

    old = client.post("/api/auth/login", json={"email": "staff@hospital.com", "password": "password123"})
    new = client.post("/api/auth/login", json={"email": "staff@hospital.com", "password": "brandnew1"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_update_cannot_change_role(client, db, admin_headers, make_user):
    staff = make_user("staff@hospital.com", UserRole.STAFF, name="Staff")
    response = client.put(
        f"/api/admin/users/{staff.id}",
        json={"name": "Promoted", "role": "admin"},
        headers=admin_headers,
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "Role cannot be changed"

    db.expire_all()
    unchanged = db.query(User).filter(User.id == staff.id).one()
    assert unchanged.role == UserRole.STAFF
    assert unchanged.name == "Staff"


def test_update_with_same_role_is_allowed(client, admin_headers, make_user):
    staff = make_user("staff@hospital.com", UserRole.STAFF)
    response = client.put(f"/api/admin/users/{staff.id}", json={"role": "Staff", "name": "Same"}, headers=admin_headers)
    assert response.status_code == 200


@pytest.mark.parametrize("payload, detail", [
    ({}, "No updates provided"),
    ({"name": "   "}, "Name cannot be empty"),
    ({"email": ""}, "Invalid email"),
    ({"password": "abc"}, "Password must be at least 6 characters"),
])
def test_update_rejects_bad_input(client, admin_headers, make_user, payload, detail):
    staff = make_user("staff@hospital.com", UserRole.STAFF)
    response = client.put(f"/api/admin/users/{staff.id}", json=payload, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == detail


def test_update_email_collision(client, admin_headers, make_user):
    make_user("taken@hospital.com", UserRole.DOCTOR)
    staff = make_user("staff@hospital.com", UserRole.STAFF)
    response = client.put(f"/api/admin/users/{staff.id}", json={"email": "TAKEN@hospital.com"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already in use"


def test_delete_patient_removes_profile(client, db, admin_headers):
    """
    Deleting a patient never leaves an orphaned profile row.
    """
    registered = client.post(
        "/api/auth/register",
        json={"email": "alice@example.com", "password": "secret1", "name": "Alice"},
    ).json()
    assert db.query(Patient).count() == 1

    response = client.delete(f"/api/admin/users/{registered['user_id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "User deleted successfully"
    assert db.query(User).filter(User.id == registered["user_id"]).first() is None
    assert db.query(Patient).count() == 0


def test_delete_missing_user(client, admin_headers):
    response = client.delete("/api/admin/users/999", headers=admin_headers)
    assert response.status_code == 404
