"""
Authentication routes for the hospital system.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging
from typing import Dict, Optional

from ..database import get_db
from .models import User
from .schemas import RegisterRequest, RegisterResponse, LoginRequest, LoginResponse, UserSummary
from .dependencies import get_current_user, get_optional_current_user
from .service import register_patient, login_user, logout_user
from .exceptions import AuthException

# Set up logging
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(prefix="/api/auth", tags=["Authentication"])

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse, summary="Patient Self-Registration")
async def register_route(
    registration: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Patient self-registration endpoint.

    Creates the user and the patient profile in a single transaction.
    Self-registration is restricted to the patient role; staff accounts
    are created by an administrator.

    Args:
        registration: Registration data (email, password, name, phone, role, patientProfile)
        request: FastAPI request object
        db: Database session

    Returns:
        RegisterResponse with confirmation message and user id

    Raises:
        HTTPException: 400 for invalid input, forbidden role or duplicate email, 500 otherwise
    """
    try:
        return await register_patient(
            db=db,
            email=registration.email,
            password=registration.password,
            name=registration.name,
            phone=registration.phone,
            role=registration.role,
            patient_profile=registration.patient_profile,
            request=request
        )
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during patient registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

@router.post("/login", response_model=LoginResponse, summary="User Login")
async def login_route(
    login_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    User login endpoint.

    Args:
        login_data: User login credentials
        request: FastAPI request object
        db: Database session

    Returns:
        LoginResponse with token, role and user summary

    Raises:
        HTTPException: 400 for missing fields, 401 for invalid credentials, 500 otherwise
    """
    try:
        return await login_user(
            db=db,
            email=login_data.email,
            password=login_data.password,
            request=request
        )
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )

@router.post("/logout", status_code=status.HTTP_200_OK, response_model=Dict[str, str], summary="User Logout")
async def logout_route(
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_current_user)
):
    """
    Logout endpoint.

    Note: Since JWT tokens are stateless, the client should simply discard the token.
    This endpoint is provided for API completeness and audit logging.
    """
    return await logout_user(db, current_user, request=request)

@router.get("/me", response_model=UserSummary, summary="Get Current User")
async def me_route(current_user: User = Depends(get_current_user)):
    """Return the identity behind the bearer token."""
    return current_user
