"""
HTTP client for the hospital authentication API.

The client only looks at status codes and the "detail" message of error
responses; it never depends on server-side exception types.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from .config import portal_settings
from .forms import RegistrationForm, build_registration_payload, validate_registration_form
from .guard import LOGIN_PATH
from .routes import landing_route
from .session import TOKEN_KEY, SessionManager
from .storage import SessionStorage

logger = logging.getLogger(__name__)


class PortalError(Exception):
    """Client-side failure that should be shown to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(PortalError):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self):
        return f"{self.status_code}: {self.message}"


class HospitalAPIClient:
    """
    Thin wrapper over httpx.Client for the /auth endpoints.

    When a storage is given, the persisted session token is sent as a
    bearer token on every request.
    """

    def __init__(
        self,
        http: Optional[httpx.Client] = None,
        storage: Optional[SessionStorage] = None,
        base_url: Optional[str] = None,
    ):
        self._owns_http = http is None
        self.http = http or httpx.Client(timeout=portal_settings.timeout)
        self.storage = storage
        self.base_url = (base_url if base_url is not None else portal_settings.api_base_url).rstrip("/")

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.storage.get_item(TOKEN_KEY) if self.storage else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, path: str, fallback: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self.http.request(method, f"{self.base_url}{path}", json=json, headers=self._headers())
        if response.is_success:
            return response.json()

        message = fallback
        try:
            detail = response.json().get("detail")
        except (ValueError, AttributeError):
            detail = None
        if isinstance(detail, str) and detail:
            message = detail
        logger.info(f"{method} {path} failed with {response.status_code}: {message}")
        raise ApiError(response.status_code, message)

    def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/auth/register", "Registration failed", json=payload)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/login", "Login failed", json={"email": email, "password": password})

    def logout(self) -> Dict[str, Any]:
        return self._request("POST", "/auth/logout", "Logout failed")

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me", "Could not load current user")


class PortalAuth:
    """
    Login, registration and logout flows of the portal.

    Each flow returns the path the portal should show next.
    """

    def __init__(self, api: HospitalAPIClient, session: SessionManager):
        self.api = api
        self.session = session

    def sign_in(self, email: str, password: str) -> str:
        """
        Log in, persist the session and return the role's landing route.

        Raises:
            ApiError: when the API rejects the credentials
            PortalError: when the response is malformed or carries no usable role
        """
        data = self.api.login(email, password)
        if not isinstance(data, dict):
            raise PortalError("Malformed login response")
        user = data.get("user") or {}
        if not isinstance(user, dict):
            raise PortalError("Malformed user in login response")
        role = data.get("role") or user.get("role")
        if not role:
            raise PortalError("Role information missing in login response")

        try:
            self.session.login(user, data.get("token"), role)
        except ValueError as e:
            raise PortalError(f"Unusable login response: {str(e)}") from e
        return landing_route(self.session.role)

    def register(self, form: RegistrationForm) -> str:
        """
        Register a patient account and return the login path.

        Raises:
            FormError: when the form fails client-side checks
            ApiError: when the API rejects the registration
        """
        validate_registration_form(form)
        self.api.register(build_registration_payload(form))
        return LOGIN_PATH

    def sign_out(self) -> str:
        """
        Clear the session and tell the server, best effort.

        The local session is cleared even when the server is unreachable.
        """
        if self.session.is_authenticated:
            try:
                self.api.logout()
            except (ApiError, httpx.HTTPError) as e:
                logger.warning(f"Server logout failed, clearing local session anyway: {str(e)}")
        self.session.logout()
        return LOGIN_PATH
