"""
Admin Router - API endpoints for user management.

Every route here requires an authenticated admin.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import Dict

from ..database import get_db
from ..auth.models import User
from ..auth.dependencies import require_admin
from ..auth.schemas import UserResponse
from ..core.pagination import PageParams, PageResponse
from .schemas import AdminUserCreate, AdminUserUpdate
from .service import list_users, get_user, create_user, update_user, delete_user

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses={404: {"description": "Not found"}}
)

@router.get("/users", response_model=PageResponse[UserResponse])
def list_users_route(
    page_params: PageParams = Depends(),
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List all users, newest first."""
    return list_users(db, page_params)

@router.get("/users/{user_id}", response_model=UserResponse)
def get_user_route(
    user_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get a single user."""
    return get_user(db, user_id)

@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
async def create_user_route(
    user_data: AdminUserCreate,
    request: Request,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Create a doctor, lab technician, pharmacist or staff account.

    Args:
        user_data: Account details
        request: FastAPI request object
        current_admin: Authenticated admin
        db: Database session

    Returns:
        UserResponse: The created account
    """
    return await create_user(db, user_data, created_by=current_admin, request=request)

@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user_route(
    user_id: int,
    user_data: AdminUserUpdate,
    request: Request,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update profile fields or reset the password of a user. Roles are fixed."""
    return await update_user(db, user_id, user_data, updated_by=current_admin, request=request)

@router.delete("/users/{user_id}", response_model=Dict[str, str])
async def delete_user_route(
    user_id: int,
    request: Request,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a user and, for patients, their profile."""
    await delete_user(db, user_id, deleted_by=current_admin, request=request)
    return {"message": "User deleted successfully"}
