"""
Bootstrap utilities for first admin creation.
Handles automatic creation of the first admin user from environment variables.
"""
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from ..auth.models import User, UserRole
from ..auth.service import normalize_email
from .security import hash_password
from ..config import settings

logger = logging.getLogger(__name__)

def admin_exists(db: Session) -> bool:
    """
    Check if any admin user exists in the database.

    Args:
        db: Database session

    Returns:
        bool: True if at least one admin exists, False otherwise
    """
    admin_count = db.query(User).filter(User.role == UserRole.ADMIN).count()
    return admin_count > 0

def create_bootstrap_admin(db: Session) -> bool:
    """
    Create the first admin user from environment variables.

    Args:
        db: Database session

    Returns:
        bool: True if admin was created successfully, False otherwise
    """
    email = normalize_email(settings.bootstrap_admin_email)
    if not email or not settings.bootstrap_admin_password:
        logger.warning("Bootstrap admin credentials not provided in environment variables")
        return False

    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        logger.warning(f"Bootstrap failed: Email {email} already exists")
        return False

    bootstrap_admin = User(
        email=email,
        name=settings.bootstrap_admin_name,
        password_hash=hash_password(settings.bootstrap_admin_password),
        role=UserRole.ADMIN,
    )

    try:
        db.add(bootstrap_admin)
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to create bootstrap admin: {str(e)}")
        db.rollback()
        return False

    db.refresh(bootstrap_admin)
    logger.info(f"Bootstrap admin created successfully: {bootstrap_admin.email} (ID: {bootstrap_admin.id})")
    return True

def bootstrap_admin_if_needed(db: Session) -> None:
    """
    Check if admin exists and create bootstrap admin if needed.
    This function should be called during application startup.

    Args:
        db: Database session
    """
    logger.info("Checking for existing admin users...")
    if admin_exists(db):
        logger.info("Admin user already present, skipping bootstrap")
        return
    if create_bootstrap_admin(db):
        logger.info("Bootstrap admin ready; change its password after first login")
    else:
        logger.info("No admin account exists yet; set BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD to create one")
