"""
User roles shared by the API and the portal client.

Kept free of database imports so the portal can use it without server
configuration.
"""
import enum
from typing import Optional

class UserRole(str, enum.Enum):
    """
    Enumeration for user roles in the hospital system.

    Roles:
    - ADMIN: System administrators who manage users and departments
    - DOCTOR: Medical practitioners
    - PATIENT: Patients; the only role open to self-registration
    - LAB_TECHNICIAN: Laboratory staff handling test requests and reports
    - PHARMACIST: Pharmacy staff handling medicines and dispensing
    - STAFF: Front-desk and billing staff
    """
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"
    LAB_TECHNICIAN = "lab_technician"
    PHARMACIST = "pharmacist"
    STAFF = "staff"

    @classmethod
    def normalize(cls, value: Optional[str]) -> Optional["UserRole"]:
        """
        Map free-form role text ("Lab Technician", " PATIENT ") onto a role.

        Returns None for blank input and raises ValueError for unknown roles.
        """
        if value is None:
            return None
        cleaned = "_".join(str(value).strip().lower().split())
        if not cleaned:
            return None
        return cls(cleaned)
