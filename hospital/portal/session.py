"""
Client session lifecycle.

The session is always exactly one of Resolving, Authenticated or Anonymous.
It is persisted under three storage keys and restored all-or-nothing: a
partially persisted session is treated as no session at all.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..auth.roles import UserRole
from .config import portal_settings
from .storage import FileStorage, SessionStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
ROLE_KEY = "role"
USER_KEY = "user"
SESSION_KEYS = (TOKEN_KEY, ROLE_KEY, USER_KEY)


@dataclass(frozen=True)
class SessionUser:
    """Summary of the signed-in user as returned by the login endpoint."""
    id: Optional[int]
    name: Optional[str]
    email: Optional[str]
    role: Optional[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionUser":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            email=data.get("email"),
            role=data.get("role"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}


@dataclass(frozen=True)
class Resolving:
    """Persisted session not yet examined."""


@dataclass(frozen=True)
class Authenticated:
    token: str
    role: UserRole
    user: SessionUser


@dataclass(frozen=True)
class Anonymous:
    """No usable session."""


SessionState = Union[Resolving, Authenticated, Anonymous]


class SessionManager:
    """
    Single writer of the client session.

    Starts in Resolving until restore() has run. Token expiry is not
    tracked here; an expired token is only noticed when the API rejects it.
    Without an explicit storage the session lives in the file named by
    PORTAL_STORAGE_PATH.
    """

    def __init__(self, storage: Optional[SessionStorage] = None):
        self.storage = storage if storage is not None else FileStorage(portal_settings.storage_path)
        self._state: SessionState = Resolving()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def loading(self) -> bool:
        return isinstance(self._state, Resolving)

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._state, Authenticated)

    @property
    def token(self) -> Optional[str]:
        return self._state.token if isinstance(self._state, Authenticated) else None

    @property
    def role(self) -> Optional[UserRole]:
        return self._state.role if isinstance(self._state, Authenticated) else None

    def restore(self) -> SessionState:
        """
        Rebuild the session from storage.

        Becomes Authenticated only when token, role and user are all present,
        the user parses as a JSON object and the role is a known role.
        Anything else clears whatever keys are left and becomes Anonymous.
        Never raises.
        """
        try:
            token = self.storage.get_item(TOKEN_KEY)
            raw_role = self.storage.get_item(ROLE_KEY)
            raw_user = self.storage.get_item(USER_KEY)
        except Exception as e:
            logger.warning(f"Session storage unreadable, starting anonymous: {str(e)}")
            return self._become_anonymous()

        if not token or not raw_role or not raw_user:
            return self._become_anonymous()

        try:
            role = UserRole(raw_role.strip().lower())
        except ValueError:
            logger.warning(f"Discarding persisted session with unknown role '{raw_role}'")
            return self._become_anonymous()

        try:
            user_data = json.loads(raw_user)
        except ValueError:
            logger.warning("Discarding persisted session with corrupted user data")
            return self._become_anonymous()
        if not isinstance(user_data, dict):
            logger.warning("Discarding persisted session whose user is not an object")
            return self._become_anonymous()

        self._state = Authenticated(token=token, role=role, user=SessionUser.from_dict(user_data))
        return self._state

    def login(self, user: Union[SessionUser, Dict[str, Any]], token: str, role: Union[UserRole, str]) -> Authenticated:
        """
        Persist a fresh session and become Authenticated.

        Raises:
            ValueError: if the token is empty or the role is not a known role
            Exception: whatever the storage raised; the session is then Anonymous
        """
        if not token:
            raise ValueError("Token is required")
        normalized_role = role if isinstance(role, UserRole) else UserRole(str(role).strip().lower())
        session_user = user if isinstance(user, SessionUser) else SessionUser.from_dict(user)

        try:
            self.storage.set_item(TOKEN_KEY, token)
            self.storage.set_item(ROLE_KEY, normalized_role.value)
            self.storage.set_item(USER_KEY, json.dumps(session_user.to_dict()))
        except Exception:
            # Never leave a partial session behind
            self._become_anonymous()
            raise

        self._state = Authenticated(token=token, role=normalized_role, user=session_user)
        logger.info(f"Session started for {session_user.email} as {normalized_role.value}")
        return self._state

    def logout(self) -> Anonymous:
        """Remove all session keys and become Anonymous."""
        self._clear_storage()
        self._state = Anonymous()
        return self._state

    def _become_anonymous(self) -> Anonymous:
        self._clear_storage()
        self._state = Anonymous()
        return self._state

    def _clear_storage(self) -> None:
        for key in SESSION_KEYS:
            try:
                self.storage.remove_item(key)
            except Exception as e:
                logger.warning(f"Could not remove session key '{key}': {str(e)}")
