"""
FastAPI dependencies for authentication and authorization.
"""
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..database import get_db
from ..core.security import verify_token
from .models import User, UserRole
from .exceptions import InvalidTokenException, RoleDeniedException

logger = logging.getLogger(__name__)

# OAuth2 scheme for JWT token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

def _user_from_token(token: str, db: Session) -> User:
    payload = verify_token(token)
    if not payload:
        raise InvalidTokenException("Invalid or expired token")

    user_id = payload.get("id")
    if not user_id:
        raise InvalidTokenException("Invalid token payload")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise InvalidTokenException("User not found")

    return user

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Get current authenticated user from JWT token with database verification.

    Args:
        token: JWT token from Authorization header
        db: Database session

    Returns:
        User: Current authenticated user

    Raises:
        InvalidTokenException: If token is invalid or user not found
    """
    return _user_from_token(token, db)

def get_optional_current_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous or stale tokens resolve to None."""
    if not token:
        return None
    try:
        return _user_from_token(token, db)
    except InvalidTokenException:
        logger.info("Ignoring invalid token on optional-auth endpoint")
        return None

def require_roles(*allowed_roles: UserRole):
    """
    Dependency factory to require specific roles.

    Args:
        allowed_roles: Roles that are allowed access

    Returns:
        Function that checks if user has required role
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            logger.warning(f"Access denied for user {current_user.id} with role {current_user.role.value}")
            raise RoleDeniedException()
        return current_user
    return role_checker

# Convenience dependencies for specific roles
require_admin = require_roles(UserRole.ADMIN)
