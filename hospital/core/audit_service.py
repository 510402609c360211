import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import Request
from typing import Optional, Dict, Any

from .audit_models import AuditLog

logger = logging.getLogger(__name__)

async def create_audit_log(
    db: Session,
    action: str,
    user_id: Optional[int] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Creates an audit log entry.

    The entry is committed immediately, so callers must not invoke this
    while a transaction of their own is still open.

    Args:
        db: The database session.
        action: A string describing the action performed (e.g., 'USER_LOGIN_SUCCESS', 'PATIENT_REGISTRATION_FAILED').
        user_id: The ID of the user who performed the action (if applicable).
        request: The FastAPI request object to extract IP address (if available).
        details: A dictionary containing additional context. Never pass passwords or hashes.

    Returns:
        The created AuditLog object.
    """
    ip_address = None
    if request and request.client:
        ip_address = request.client.host

    audit_entry = AuditLog(
        user_id=user_id,
        action=action,
        ip_address=ip_address,
        details=details
    )
    db.add(audit_entry)
    db.commit()
    db.refresh(audit_entry)
    return audit_entry

async def record_audit_log(
    db: Session,
    action: str,
    user_id: Optional[int] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None
) -> Optional[AuditLog]:
    """
    Best-effort variant of create_audit_log for events whose own work is
    already committed. A failed audit write is rolled back and logged so it
    cannot turn a completed operation into an error response.
    """
    try:
        return await create_audit_log(db, action=action, user_id=user_id, request=request, details=details)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Audit log '{action}' could not be written: {str(e)}")
        return None
