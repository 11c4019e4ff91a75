"""RBAC: admin, staff and parent profiles linked to Firebase identities."""
from enum import Enum

from nursery.models.base import StoreModel


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    PARENT = "parent"


class UserProfile(StoreModel):
    """Profile at users/{uid}; link_id is the Staff or Child id."""

    role: UserRole
    link_id: str = ""


class CurrentUser(StoreModel):
    """Authenticated caller resolved from a Firebase ID token."""

    uid: str
    email: str = ""
    role: UserRole
    link_id: str = ""
