"""
Registration form handling for the portal.

These checks only spare the user a round trip; the API validates again.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel

MIN_PASSWORD_LENGTH = 6


class FormError(ValueError):
    """Form input rejected before reaching the API."""


class RegistrationForm(BaseModel):
    """Raw values of the patient registration form."""
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    phone: str = ""
    date_of_birth: str = ""
    gender: str = ""
    address: str = ""


def validate_registration_form(form: RegistrationForm) -> None:
    """
    Raises:
        FormError: when a required field is blank, the passwords differ
            or the password is too short
    """
    if not form.name.strip() or not form.email.strip() or not form.password:
        raise FormError("Name, email and password are required")
    if form.password != form.confirm_password:
        raise FormError("Passwords do not match")
    if len(form.password) < MIN_PASSWORD_LENGTH:
        raise FormError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def _blank_to_none(value: str) -> Optional[str]:
    value = value.strip()
    return value or None


def build_registration_payload(form: RegistrationForm) -> Dict[str, Any]:
    """Request body for POST /auth/register; never carries a role."""
    phone = _blank_to_none(form.phone)
    return {
        "name": form.name.strip(),
        "email": form.email.strip(),
        "password": form.password,
        "phone": phone,
        "patientProfile": {
            "date_of_birth": _blank_to_none(form.date_of_birth),
            "gender": _blank_to_none(form.gender),
            "address": _blank_to_none(form.address),
            "phone": phone,
        },
    }
