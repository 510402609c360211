"""
Admin Schemas - Pydantic models for administrator-managed accounts.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

class AdminUserCreate(BaseModel):
    """
    Admin User Creation Schema - Used when an admin creates a staff account

    Fields:
    - name: Display name
    - email: Email address
    - role: doctor, lab_technician, pharmacist or staff ("Lab Technician" is accepted)
    - password: Initial password, at least 6 characters after trimming
    - phone: Contact number (optional)
    """
    name: str
    email: EmailStr
    role: str
    password: str
    phone: Optional[str] = None

    class Config:
        """Configuration for Pydantic model"""
        json_schema_extra = {
            "example": {
                "name": "Gregory House",
                "email": "dr.house@hospital.com",
                "role": "doctor",
                "password": "secure123",
                "phone": "+1 555 0100"
            }
        }

class AdminUserUpdate(BaseModel):
    """
    Admin User Update Schema - Every field is optional; only sent fields change

    Fields:
    - name: New display name (cannot be blank)
    - email: New email address (cannot be blank)
    - role: Must match the current role; roles cannot be changed
    - phone: New contact number, blank clears it
    - password: Password reset, at least 6 characters
    """
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(None, description="Leave empty to keep the current password")
