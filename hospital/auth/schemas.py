"""
Auth Schemas - Pydantic models for registration, login and session payloads.

Registration and login bodies accept loosely typed fields on purpose: the
service layer owns trimming, normalisation and the 400 responses, so a
missing or non-string password is reported the same way as an empty one.
"""
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from datetime import datetime
from .models import UserRole

class PatientProfileInput(BaseModel):
    """
    Optional clinical/contact details captured at self-registration

    Fields:
    - date_of_birth: ISO date string (YYYY-MM-DD)
    - gender: Patient's gender
    - address: Home address
    - emergency_contact: Emergency contact name/number
    - blood_type: Blood type, e.g. "A+"
    - phone: Contact number; the top-level phone is used when absent
    """
    model_config = ConfigDict(extra="ignore")

    date_of_birth: Optional[str] = Field(None, validation_alias=AliasChoices("date_of_birth", "dateOfBirth"))
    gender: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = Field(None, validation_alias=AliasChoices("emergency_contact", "emergencyContact"))
    blood_type: Optional[str] = Field(None, validation_alias=AliasChoices("blood_type", "bloodType"))
    phone: Optional[str] = None

class RegisterRequest(BaseModel):
    """
    Patient Self-Registration Schema

    Fields:
    - email: Email address (trimmed and lowercased by the service)
    - password: Plain text password (hashed before storage)
    - name: Display name
    - phone: Contact number (optional)
    - role: Must be absent or "patient"
    - patient_profile: Nested profile details, also accepted as "patientProfile"
    """
    model_config = ConfigDict(extra="ignore")

    email: Optional[Any] = None
    password: Optional[Any] = None
    name: Optional[Any] = None
    phone: Optional[Any] = None
    role: Optional[Any] = None
    # Parsed by the service so a malformed profile is a 400 and never masks a forbidden role
    patient_profile: Optional[Any] = Field(
        None, validation_alias=AliasChoices("patientProfile", "patient_profile")
    )

class RegisterResponse(BaseModel):
    """Returned after a successful self-registration."""
    message: str
    user_id: int

class LoginRequest(BaseModel):
    """
    User Login Schema - Used for authentication

    Fields:
    - email: User's email address
    - password: User's plain text password
    """
    email: Optional[Any] = None
    password: Optional[Any] = None

class UserSummary(BaseModel):
    """
    User Summary Schema - The identity the client keeps in its session

    Fields:
    - id: User ID
    - name: Display name
    - email: Email address
    - role: User role
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole

class LoginResponse(BaseModel):
    """
    Login Response Schema - Returned after successful authentication

    Fields:
    - message: Human-readable status
    - token: JWT access token
    - token_type: Type of token (always "bearer")
    - role: Lowercased role, duplicated from user for older clients
    - user: User summary for session hydration
    """
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    role: UserRole
    user: UserSummary

class UserResponse(BaseModel):
    """
    User Response Schema - Used when returning user data to admins

    Fields:
    - id: User ID
    - name: Display name
    - email: Email address
    - role: User role
    - phone: Contact number (if provided)
    - created_at: When the account was created
    - updated_at: When the account was last updated
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
