"""
Admin Service - Business logic for administrator-managed user accounts.

Admins create clinical and operational staff accounts, edit profile
fields, reset passwords and delete accounts. Patients only ever come in
through self-registration.
"""
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from fastapi import Request, status
import logging

from ..auth.models import User, UserRole
from ..auth.exceptions import (
    InvalidInputException,
    ForbiddenRoleException,
    EmailAlreadyExistsException,
    ResourceNotFoundException,
    StorageUnavailableException,
)
from ..auth.service import normalize_string, normalize_email, find_user_by_email
from ..core.security import hash_password
from ..core.audit_service import record_audit_log
from ..core.pagination import PageParams, PageResponse, paginate
from ..auth.schemas import UserResponse
from .schemas import AdminUserCreate, AdminUserUpdate

# Set up logging
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

ADMIN_CREATABLE_ROLES = frozenset({
    UserRole.DOCTOR,
    UserRole.LAB_TECHNICIAN,
    UserRole.PHARMACIST,
    UserRole.STAFF,
})

def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise EmailAlreadyExistsException("Email already in use") from None
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {str(e)}")
        raise StorageUnavailableException() from e

def list_users(db: Session, page_params: PageParams) -> PageResponse:
    """
    List all users, newest first.

    Args:
        db: Database session
        page_params: Pagination parameters

    Returns:
        PageResponse of UserResponse items
    """
    query = db.query(User).order_by(User.created_at.desc(), User.id.desc())
    return paginate(query, page_params, UserResponse)

def get_user(db: Session, user_id: int) -> User:
    """
    Get a user by ID.

    Raises:
        ResourceNotFoundException: If user not found
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ResourceNotFoundException("User not found")
    return user

async def create_user(
    db: Session,
    user_data: AdminUserCreate,
    created_by: User,
    request: Optional[Request] = None
) -> User:
    """
    Create a doctor, lab technician, pharmacist or staff account.

    Args:
        db: Database session
        user_data: Account details
        created_by: Admin performing the action
        request: FastAPI request object for audit logging

    Returns:
        User: The created account

    Raises:
        InvalidInputException: If name, email, role or password are missing or too short
        ForbiddenRoleException: If the role is not one admins may create
        EmailAlreadyExistsException: If email already exists
    """
    name = normalize_string(user_data.name)
    email = normalize_email(user_data.email)
    password = user_data.password.strip()
    role_text = normalize_string(user_data.role)

    if not name or not email or not role_text or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputException("Name, email, role, and a password of at least 6 characters are required")

    try:
        role = UserRole.normalize(role_text)
    except ValueError:
        role = None

    if role not in ADMIN_CREATABLE_ROLES:
        raise ForbiddenRoleException(
            "Admins can only register doctors, lab technicians, pharmacists, or staff",
            status_code=status.HTTP_403_FORBIDDEN,
        )

    if find_user_by_email(db, email):
        raise EmailAlreadyExistsException("Email already in use")

    user_obj = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        phone=normalize_string(user_data.phone),
    )
    db.add(user_obj)
    _commit(db, "create user")
    db.refresh(user_obj)

    logger.info(f"Admin {created_by.id} created {role.value} account {user_obj.id}")
    await record_audit_log(db, action="ADMIN_USER_CREATED", user_id=created_by.id, request=request, details={"created_user_id": user_obj.id, "role": role.value})
    return user_obj

async def update_user(
    db: Session,
    user_id: int,
    user_data: AdminUserUpdate,
    updated_by: User,
    request: Optional[Request] = None
) -> User:
    """
    Update profile fields of a user and optionally reset their password.

    Only fields present in the request are touched. The role of an existing
    account cannot be changed.

    Raises:
        ResourceNotFoundException: If user not found
        InvalidInputException: If a field is blank, the password too short, or nothing changes
        ForbiddenRoleException: If a different role is requested
        EmailAlreadyExistsException: If the new email belongs to someone else
    """
    user = get_user(db, user_id)
    provided = user_data.model_fields_set
    updates = {}

    if "name" in provided:
        name = normalize_string(user_data.name)
        if not name:
            raise InvalidInputException("Name cannot be empty")
        updates["name"] = name

    if "email" in provided:
        email = normalize_email(user_data.email)
        if not email:
            raise InvalidInputException("Invalid email")
        owner = find_user_by_email(db, email)
        if owner and owner.id != user.id:
            raise EmailAlreadyExistsException("Email already in use")
        updates["email"] = email

    role_text = normalize_string(user_data.role)
    if role_text:
        try:
            requested_role = UserRole.normalize(role_text)
        except ValueError:
            requested_role = None
        if requested_role != user.role:
            raise ForbiddenRoleException("Role cannot be changed", status_code=status.HTTP_403_FORBIDDEN)

    if "phone" in provided:
        updates["phone"] = normalize_string(user_data.phone)

    if user_data.password:
        password = user_data.password.strip()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputException("Password must be at least 6 characters")
        updates["password_hash"] = hash_password(password)

    if not updates:
        raise InvalidInputException("No updates provided")

    # Apply only after every check has passed
    for field, value in updates.items():
        setattr(user, field, value)
    _commit(db, "update user")
    db.refresh(user)

    changed = sorted("password" if field == "password_hash" else field for field in updates)
    logger.info(f"Admin {updated_by.id} updated user {user.id}: {', '.join(changed)}")
    await record_audit_log(db, action="ADMIN_USER_UPDATED", user_id=updated_by.id, request=request, details={"updated_user_id": user.id, "fields": changed})
    return user

async def delete_user(
    db: Session,
    user_id: int,
    deleted_by: User,
    request: Optional[Request] = None
) -> None:
    """
    Delete a user. A patient's profile row is removed in the same transaction.

    Raises:
        ResourceNotFoundException: If user not found
    """
    user = get_user(db, user_id)
    db.delete(user)
    _commit(db, "delete user")

    logger.info(f"Admin {deleted_by.id} deleted user {user_id}")
    await record_audit_log(db, action="ADMIN_USER_DELETED", user_id=deleted_by.id, request=request, details={"deleted_user_id": user_id})
