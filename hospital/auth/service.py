"""
Authentication service layer for business logic.
"""
import logging
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from pydantic import ValidationError
from fastapi import Request
from typing import Dict, Any, Optional

from ..core.security import hash_password, verify_password, create_access_token
from ..core.audit_service import record_audit_log
from ..patients.models import Patient
from .models import User, UserRole
from .schemas import PatientProfileInput, UserSummary
from .exceptions import (
    InvalidInputException,
    ForbiddenRoleException,
    EmailAlreadyExistsException,
    InvalidCredentialsException,
    StorageUnavailableException,
)

# Set up logging
logger = logging.getLogger(__name__)

def normalize_string(value: Any) -> Optional[str]:
    """Trim a value to a string, mapping None and blank text to None."""
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None

def normalize_email(value: Any) -> Optional[str]:
    """Trim and lowercase an email; non-string input counts as missing."""
    if not isinstance(value, str):
        return None
    normalized = normalize_string(value)
    return normalized.lower() if normalized else None

def _is_patient_role(role: Any) -> bool:
    if not isinstance(role, str):
        return False
    try:
        normalized = UserRole.normalize(role)
    except ValueError:
        return False
    return normalized in (None, UserRole.PATIENT)

def _parse_date_of_birth(value: Optional[str]) -> Optional[date]:
    normalized = normalize_string(value)
    if normalized is None:
        return None
    try:
        return date.fromisoformat(normalized)
    except ValueError:
        raise InvalidInputException("Invalid date of birth")

def find_user_by_email(db: Session, email: str) -> Optional[User]:
    """Look up a user by an already normalised email."""
    return db.query(User).filter(User.email == email).first()

def _parse_patient_profile(value: Any) -> PatientProfileInput:
    if value is None:
        return PatientProfileInput()
    if isinstance(value, PatientProfileInput):
        return value
    try:
        return PatientProfileInput.model_validate(value)
    except ValidationError:
        raise InvalidInputException("Invalid patient profile")

def _build_patient_profile(user_obj: User, profile: PatientProfileInput, date_of_birth: Optional[date], phone: Optional[str]) -> Patient:
    return Patient(
        user_id=user_obj.id,
        date_of_birth=date_of_birth,
        gender=normalize_string(profile.gender),
        phone=normalize_string(profile.phone) or phone,
        address=normalize_string(profile.address),
        emergency_contact=normalize_string(profile.emergency_contact),
        blood_type=normalize_string(profile.blood_type),
    )

async def register_patient(
    db: Session,
    email: Any,
    password: Any,
    name: Any,
    phone: Any = None,
    role: Any = None,
    patient_profile: Any = None,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Register a new patient user together with their patient profile.

    The user row and the profile row are written in one transaction: either
    both exist afterwards or neither does. The unique index on users.email
    decides concurrent duplicate registrations; the lookup beforehand only
    fails fast.

    Args:
        db: Database session
        email: User's email address (trimmed and lowercased here)
        password: User's password, any non-empty string
        name: User's display name
        phone: User's contact number (optional)
        role: Requested role; anything other than patient is refused
        patient_profile: Optional profile details, as a mapping or PatientProfileInput
        request: FastAPI request object for audit logging

    Returns:
        Dict with registration success message and the new user id

    Raises:
        ForbiddenRoleException: If a non-patient role was requested
        InvalidInputException: If required fields are missing or malformed
        EmailAlreadyExistsException: If email already exists
        StorageUnavailableException: If the database failed; nothing was written
    """
    if role is not None and not _is_patient_role(role):
        logger.warning(f"Registration refused: role {role!r} requested through self-registration")
        raise ForbiddenRoleException()

    normalized_email = normalize_email(email)
    normalized_name = normalize_string(name)
    if not normalized_email or not normalized_name or not isinstance(password, str) or not password:
        raise InvalidInputException()

    normalized_phone = normalize_string(phone)
    profile = _parse_patient_profile(patient_profile)
    date_of_birth = _parse_date_of_birth(profile.date_of_birth)

    logger.info(f"Patient registration attempt for email: {normalized_email}")
    await record_audit_log(db, action="PATIENT_REGISTRATION_INITIATED", request=request, details={"email": normalized_email})

    try:
        if find_user_by_email(db, normalized_email):
            raise EmailAlreadyExistsException()

        user_obj = User(
            email=normalized_email,
            password_hash=hash_password(password),
            name=normalized_name,
            role=UserRole.PATIENT,
            phone=normalized_phone,
        )
        db.add(user_obj)
        db.flush()
        user_id = user_obj.id

        db.add(_build_patient_profile(user_obj, profile, date_of_birth, normalized_phone))
        db.commit()
    except EmailAlreadyExistsException:
        db.rollback()
        logger.warning(f"Registration failed: Email {normalized_email} already registered")
        await record_audit_log(db, action="PATIENT_REGISTRATION_FAILED_EMAIL_EXISTS", request=request, details={"email": normalized_email})
        raise
    except IntegrityError:
        # Lost a race against a concurrent registration of the same email
        db.rollback()
        logger.warning(f"Registration failed: unique constraint rejected {normalized_email}")
        await record_audit_log(db, action="PATIENT_REGISTRATION_FAILED_EMAIL_EXISTS", request=request, details={"email": normalized_email})
        raise EmailAlreadyExistsException() from None
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Registration rolled back for {normalized_email}: {str(e)}")
        raise StorageUnavailableException() from e
    except Exception:
        db.rollback()
        raise

    # Committed: nothing below may turn this into an error response
    logger.info(f"Patient account created: {user_id}")
    await record_audit_log(db, action="PATIENT_REGISTRATION_SUCCESS", user_id=user_id, request=request, details={"email": normalized_email, "user_id": user_id})

    return {
        "message": "User registered successfully",
        "user_id": user_id,
    }

async def login_user(
    db: Session,
    email: Any,
    password: Any,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Authenticate a user and generate access token.

    Unknown emails and wrong passwords raise the same exception with the
    same message so callers cannot tell which accounts exist.

    Args:
        db: Database session
        email: User's email address
        password: User's password
        request: FastAPI request object for audit logging

    Returns:
        Dict with token, role and user summary

    Raises:
        InvalidInputException: If email or password is missing
        InvalidCredentialsException: If credentials are invalid
        StorageUnavailableException: If the user lookup failed
    """
    normalized_email = normalize_email(email)
    if not normalized_email or not isinstance(password, str) or not password:
        raise InvalidInputException("Email and password required")

    try:
        user = find_user_by_email(db, normalized_email)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Login lookup failed for {normalized_email}: {str(e)}")
        raise StorageUnavailableException() from e

    if not verify_password(password, user.password_hash if user else None):
        logger.warning(f"Login failed: Invalid credentials for {normalized_email}")
        await record_audit_log(db, action="USER_LOGIN_FAILED_INVALID_CREDENTIALS", user_id=user.id if user else None, request=request, details={"email": normalized_email})
        raise InvalidCredentialsException()

    token_data = {
        "id": user.id,
        "email": user.email,
        "role": user.role.value,
    }
    token = create_access_token(token_data)
    # Snapshot before the audit commit expires the instance
    summary = UserSummary.model_validate(user)

    logger.info(f"Login successful: User {summary.id} ({normalized_email})")
    await record_audit_log(db, action="USER_LOGIN_SUCCESS", user_id=summary.id, request=request, details={"email": normalized_email})

    return {
        "message": "Login successful",
        "token": token,
        "token_type": "bearer",
        "role": summary.role,
        "user": summary,
    }

async def logout_user(db: Session, user: Optional[User], request: Optional[Request] = None) -> Dict[str, str]:
    """
    Record a logout. Tokens are stateless and stay valid until they expire;
    the client discards its copy.
    """
    await record_audit_log(
        db,
        action="USER_LOGOUT",
        user_id=user.id if user else None,
        request=request,
        details={"message": "User initiated logout"}
    )
    return {"message": "Successfully logged out. Please discard your token."}
