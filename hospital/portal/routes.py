"""
Portal route table: where each role lands and which roles may enter each area.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union

from ..auth.roles import UserRole
from .guard import Allow, GuardDecision, LOGIN_PATH, RedirectToLogin, UNAUTHORIZED_PATH, authorize
from .session import SessionState

PUBLIC_PATHS = frozenset({LOGIN_PATH, "/register", "/forgot-password", UNAUTHORIZED_PATH})

# Area prefix -> roles allowed anywhere below it
PROTECTED_AREAS: Dict[str, FrozenSet[UserRole]] = {
    "/admin": frozenset({UserRole.ADMIN}),
    "/doctor": frozenset({UserRole.DOCTOR}),
    "/patient": frozenset({UserRole.PATIENT}),
    "/lab": frozenset({UserRole.LAB_TECHNICIAN}),
    "/lab-tech": frozenset({UserRole.LAB_TECHNICIAN}),
    "/pharmacy": frozenset({UserRole.PHARMACIST}),
    "/billing": frozenset({UserRole.ADMIN, UserRole.STAFF}),
    "/staff": frozenset({UserRole.STAFF}),
}


@dataclass(frozen=True)
class NotFound:
    path: str


def landing_route(role: Union[UserRole, str]) -> str:
    """
    Dashboard a user is sent to after signing in.

    Raises:
        ValueError: for a role without a landing route
    """
    role = role if isinstance(role, UserRole) else UserRole(str(role).strip().lower())
    if role is UserRole.ADMIN:
        return "/admin/dashboard"
    elif role is UserRole.DOCTOR:
        return "/doctor/dashboard"
    elif role is UserRole.PATIENT:
        return "/patient/dashboard"
    elif role is UserRole.LAB_TECHNICIAN:
        return "/lab/dashboard"
    elif role is UserRole.PHARMACIST:
        return "/pharmacy/dashboard"
    elif role is UserRole.STAFF:
        return "/staff/dashboard"
    raise ValueError(f"No landing route for role {role!r}")


def _normalize_path(path: str) -> str:
    path = (path or "/").split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def required_roles_for(path: str) -> Optional[FrozenSet[UserRole]]:
    """
    Roles allowed on a path, or None when no protected area owns it.

    Areas match on whole segments, so "/lab" covers "/lab/tests" but not
    "/lab-tech/dashboard".
    """
    path = _normalize_path(path)
    for prefix, roles in PROTECTED_AREAS.items():
        if path == prefix or path.startswith(prefix + "/"):
            return roles
    return None


def navigate(state: SessionState, path: str) -> Union[GuardDecision, NotFound]:
    """
    Resolve a navigation to a portal path.

    Public paths are always allowed, "/" goes to the login page and
    protected areas go through the route guard.
    """
    normalized = _normalize_path(path)
    if normalized == "/":
        return RedirectToLogin()
    if normalized in PUBLIC_PATHS:
        return Allow()
    roles = required_roles_for(normalized)
    if roles is None:
        return NotFound(path=normalized)
    return authorize(state, roles, location=path)
