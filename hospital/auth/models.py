"""
User Model - Stores every login identity of the hospital system.

The role column drives which portal a user lands on and which routes
they may reach.
"""
from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .roles import UserRole

class User(Base):
    """
    User Model - Stores all user information in the system

    Fields:
    - id: Primary key for user identification
    - email: Unique, lowercased email address used for login
    - password_hash: bcrypt hash of the password (never store raw passwords)
    - name: User's display name
    - role: User role (admin, doctor, patient, lab_technician, pharmacist, staff)
    - phone: Contact number (optional)
    - created_at: Timestamp when user was created
    - updated_at: Timestamp when user was last updated
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(
        Enum(UserRole, name="userrole", values_callable=lambda roles: [role.value for role in roles]),
        nullable=False,
        default=UserRole.PATIENT,
    )
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    patient_profile = relationship(
        "Patient",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        """String representation of the User model"""
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value if self.role else None}')>"
