"""Pydantic models for documents in the Realtime Database and API schemas."""
from nursery.models.attendance import (
    AttendanceDeleteRequest,
    AttendanceEntry,
    AttendanceRecord,
    AttendanceStatus,
    StaffAttendanceRecord,
)
from nursery.models.child import Child, ChildCreate, ChildUpdate, Guardian, GuardianRelation
from nursery.models.invoice import Invoice, InvoiceCreate, InvoiceIdsRequest, InvoiceStatus, InvoiceUpdate
from nursery.models.settings import SETTINGS_PATH, DueDateStrategy, NurserySettings
from nursery.models.staff import Staff, StaffCreate, StaffRole, StaffUpdate
from nursery.models.user import CurrentUser, UserProfile, UserRole

__all__ = [
    "AttendanceDeleteRequest",
    "AttendanceEntry",
    "AttendanceRecord",
    "AttendanceStatus",
    "StaffAttendanceRecord",
    "Child",
    "ChildCreate",
    "ChildUpdate",
    "Guardian",
    "GuardianRelation",
    "Invoice",
    "InvoiceCreate",
    "InvoiceIdsRequest",
    "InvoiceStatus",
    "InvoiceUpdate",
    "SETTINGS_PATH",
    "DueDateStrategy",
    "NurserySettings",
    "Staff",
    "StaffCreate",
    "StaffRole",
    "StaffUpdate",
    "CurrentUser",
    "UserProfile",
    "UserRole",
]
