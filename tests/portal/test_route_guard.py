"""
Tests for the route guard and the portal route table.
"""
import pytest

from hospital.auth.roles import UserRole
from hospital.portal.guard import (
    Allow,
    Pending,
    RedirectToLogin,
    RedirectToUnauthorized,
    authorize,
)
from hospital.portal.routes import (
    PROTECTED_AREAS,
    NotFound,
    landing_route,
    navigate,
    required_roles_for,
)
from hospital.portal.session import Anonymous, Authenticated, Resolving, SessionUser


def signed_in(role):
    return Authenticated(token="tok", role=role, user=SessionUser(id=1, name="User", email="user@hospital.com", role=role.value))


def test_resolving_is_pending():
    assert authorize(Resolving(), [UserRole.ADMIN], "/admin/dashboard") == Pending()


@pytest.mark.parametrize("roles", [frozenset(), *PROTECTED_AREAS.values()])
def test_anonymous_is_sent_to_login(roles):
    decision = authorize(Anonymous(), roles, "/patient/appointments")
    assert decision == RedirectToLogin(from_location="/patient/appointments")
    assert decision.to == "/login"


def test_role_mismatch_is_unauthorized():
    decision = authorize(signed_in(UserRole.DOCTOR), [UserRole.ADMIN], "/admin/users")
    assert decision == RedirectToUnauthorized()
    assert decision.to == "/unauthorized"


def test_matching_role_is_allowed():
    assert authorize(signed_in(UserRole.ADMIN), [UserRole.ADMIN]) == Allow()


def test_no_required_roles_allows_any_signed_in_user():
    for role in UserRole:
        assert authorize(signed_in(role)) == Allow()


def test_required_roles_accept_strings():
    assert authorize(signed_in(UserRole.STAFF), ["admin", "Staff"]) == Allow()


@pytest.mark.parametrize("role, path", [
    (UserRole.ADMIN, "/admin/dashboard"),
    (UserRole.DOCTOR, "/doctor/dashboard"),
    (UserRole.PATIENT, "/patient/dashboard"),
    (UserRole.LAB_TECHNICIAN, "/lab/dashboard"),
    (UserRole.PHARMACIST, "/pharmacy/dashboard"),
    (UserRole.STAFF, "/staff/dashboard"),
])
def test_landing_routes(role, path):
    assert landing_route(role) == path
    # Each role may enter its own landing page
    assert navigate(signed_in(role), path) == Allow()


def test_every_role_has_a_landing_route():
    for role in UserRole:
        assert landing_route(role).endswith("/dashboard")


def test_landing_route_accepts_role_text():
    assert landing_route("Lab_Technician") == "/lab/dashboard"
    with pytest.raises(ValueError):
        landing_route("wizard")


def test_area_prefix_matches_whole_segments():
    assert required_roles_for("/lab/tests") == frozenset({UserRole.LAB_TECHNICIAN})
    assert required_roles_for("/lab-tech/dashboard") == frozenset({UserRole.LAB_TECHNICIAN})
    assert required_roles_for("/laboratory") is None
    assert required_roles_for("/patients") is None


def test_billing_is_shared_by_admin_and_staff():
    assert navigate(signed_in(UserRole.ADMIN), "/billing/invoices") == Allow()
    assert navigate(signed_in(UserRole.STAFF), "/billing/invoices") == Allow()
    assert navigate(signed_in(UserRole.PHARMACIST), "/billing/invoices") == RedirectToUnauthorized()


@pytest.mark.parametrize("path", ["/login", "/register", "/forgot-password", "/unauthorized"])
def test_public_paths_always_allowed(path):
    for state in (Resolving(), Anonymous(), signed_in(UserRole.DOCTOR)):
        assert navigate(state, path) == Allow()


def test_root_redirects_to_login():
    assert navigate(signed_in(UserRole.ADMIN), "/") == RedirectToLogin()


def test_unknown_path():
    assert navigate(signed_in(UserRole.ADMIN), "/nowhere") == NotFound(path="/nowhere")


def test_navigate_remembers_requested_location():
    decision = navigate(Anonymous(), "/doctor/patients?page=2")
    assert decision == RedirectToLogin(from_location="/doctor/patients?page=2")


def test_patient_session_routing():
    """
    A signed-in patient reaches their dashboard but not the admin area.
    """
    state = signed_in(UserRole.PATIENT)
    assert navigate(state, "/patient/dashboard") == Allow()
    assert navigate(state, "/admin/dashboard") == RedirectToUnauthorized()
    assert navigate(state, "/patient/dashboard/") == Allow()
