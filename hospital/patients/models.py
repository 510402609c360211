"""
Patient Model - Stores patient-specific information.

One row per user of role patient, created in the same transaction as the
user during self-registration.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Date, func
from sqlalchemy.orm import relationship
from ..database import Base

class Patient(Base):
    """
    Patient Model - Stores patient-specific information

    Fields:
    - id: Primary key for patient profile
    - user_id: Foreign key to User model
    - date_of_birth: Patient's date of birth
    - gender: Patient's gender
    - phone: Contact number (defaults to the account phone)
    - address: Patient's address
    - emergency_contact: Emergency contact information
    - blood_type: Blood type, e.g. "O+"
    - created_at: When the patient profile was created
    - updated_at: When the patient profile was last updated
    """
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    emergency_contact = Column(String, nullable=True)
    blood_type = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="patient_profile", uselist=False)

    def __repr__(self):
        """String representation of the Patient model"""
        return f"<Patient(id={self.id}, user_id={self.user_id})>"

    @property
    def name(self) -> str:
        """Get patient's name from associated user"""
        return self.user.name if self.user else None

    @property
    def email(self) -> str:
        """Get patient's email from associated user"""
        return self.user.email if self.user else None
