"""Child records with guardian contact and the child's QR code id."""
from enum import Enum
from typing import Optional

from pydantic import Field

from nursery.models.base import StoreModel


class GuardianRelation(str, Enum):
    FATHER = "father"
    MOTHER = "mother"
    OTHER = "other"


class Guardian(StoreModel):
    name: str
    relation: GuardianRelation = GuardianRelation.OTHER
    phone: str = ""
    email: str = ""
    account_id: Optional[str] = None  # Firebase uid once a parent account exists


class Child(StoreModel):
    """Child document at children/{id}."""

    id: str = ""
    name: str
    age: int = 0
    address: str = ""
    health_status: str = ""
    guardian: Guardian
    qr_code_id: str  # assigned once on creation


class ChildCreate(StoreModel):
    name: str
    age: int = Field(default=0, ge=0)
    address: str = ""
    health_status: str = ""
    guardian: Guardian


class ChildUpdate(StoreModel):
    """All fields optional for PATCH; qr_code_id is not updatable."""

    name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    address: Optional[str] = None
    health_status: Optional[str] = None
    guardian: Optional[Guardian] = None
