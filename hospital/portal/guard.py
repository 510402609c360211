"""
Route guard for the portal.

authorize() is a pure function of the current session state, so it is
evaluated on every navigation and never cached.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..auth.roles import UserRole
from .session import Anonymous, Authenticated, Resolving, SessionState

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"


@dataclass(frozen=True)
class Allow:
    """Render the requested route."""


@dataclass(frozen=True)
class Pending:
    """Session still resolving: render nothing and do not redirect."""


@dataclass(frozen=True)
class RedirectToLogin:
    from_location: Optional[str] = None
    to: str = LOGIN_PATH


@dataclass(frozen=True)
class RedirectToUnauthorized:
    to: str = UNAUTHORIZED_PATH


GuardDecision = Union[Allow, Pending, RedirectToLogin, RedirectToUnauthorized]


def _as_roles(required_roles: Iterable[Union[UserRole, str]]) -> frozenset:
    return frozenset(
        role if isinstance(role, UserRole) else UserRole(str(role).strip().lower())
        for role in required_roles
    )


def authorize(
    state: SessionState,
    required_roles: Iterable[Union[UserRole, str]] = (),
    location: Optional[str] = None,
) -> GuardDecision:
    """
    Decide what to do with a navigation to a guarded route.

    Args:
        state: Current session state
        required_roles: Roles allowed on the route; empty means any signed-in user
        location: Requested location, remembered for the post-login redirect

    Returns:
        GuardDecision: Pending, RedirectToLogin, RedirectToUnauthorized or Allow
    """
    roles = _as_roles(required_roles)

    if isinstance(state, Resolving):
        return Pending()
    if isinstance(state, Anonymous):
        return RedirectToLogin(from_location=location)
    if isinstance(state, Authenticated):
        if roles and state.role not in roles:
            return RedirectToUnauthorized()
        return Allow()
    raise TypeError(f"Unknown session state: {state!r}")
