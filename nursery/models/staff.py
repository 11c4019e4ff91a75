"""Staff records: role, contact details, QR code id and linked account."""
from enum import Enum
from typing import Optional

from nursery.models.base import StoreModel


class StaffRole(str, Enum):
    TEACHER = "teacher"
    SUPERVISOR = "supervisor"
    ADMIN_STAFF = "admin-staff"


class Staff(StoreModel):
    """Staff document at staff/{id}."""

    id: str = ""
    name: str
    role: StaffRole = StaffRole.TEACHER
    specialization: Optional[str] = None
    phone: str = ""
    email: str = ""
    qr_code_id: str
    account_id: Optional[str] = None


class StaffCreate(StoreModel):
    name: str
    role: StaffRole = StaffRole.TEACHER
    specialization: Optional[str] = None
    phone: str = ""
    email: str = ""


class StaffUpdate(StoreModel):
    name: Optional[str] = None
    role: Optional[StaffRole] = None
    specialization: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
