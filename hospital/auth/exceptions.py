"""
Authentication-specific exceptions.
"""
from fastapi import HTTPException, status
from typing import Dict, Optional

class AuthException(HTTPException):
    """Base class for authentication exceptions."""
    def __init__(self, status_code: int, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class InvalidInputException(AuthException):
    """Exception raised when a required field is missing or malformed."""
    def __init__(self, detail: str = "Missing required fields"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class ForbiddenRoleException(AuthException):
    """Exception raised when a caller asks for a role it may not assign."""
    def __init__(
        self,
        detail: str = "Self-registration is only available for patients",
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(status_code=status_code, detail=detail)

class EmailAlreadyExistsException(AuthException):
    """Exception raised when email already exists."""
    def __init__(self, detail: str = "User already exists"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class InvalidCredentialsException(AuthException):
    """Exception raised when credentials are invalid."""
    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class StorageUnavailableException(AuthException):
    """Exception raised when the database fails mid-operation. Safe to retry."""
    def __init__(self, detail: str = "Service temporarily unavailable. Please try again."):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

class InvalidTokenException(AuthException):
    """Exception raised when token is missing, invalid or expired."""
    def __init__(self, detail: str = "Invalid token"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class RoleDeniedException(AuthException):
    """Exception raised when user doesn't have required role."""
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

class ResourceNotFoundException(AuthException):
    """Exception raised when a requested record does not exist."""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
