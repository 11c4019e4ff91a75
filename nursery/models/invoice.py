"""Invoices: amount, due date and the Unpaid -> Overdue -> Paid lifecycle."""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import Field

from nursery.models.base import StoreModel


class InvoiceStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"
    OVERDUE = "Overdue"


class Invoice(StoreModel):
    """Invoice document at invoices/{id}."""

    id: str = ""
    child_id: str
    child_name: str = ""
    amount: float
    issue_date: date
    due_date: date
    status: InvoiceStatus = InvoiceStatus.UNPAID
    payment_date: Optional[date] = None


class InvoiceCreate(StoreModel):
    child_id: str
    amount: float = Field(gt=0)
    issue_date: Optional[date] = None  # defaults to today
    due_date: date


class InvoiceUpdate(StoreModel):
    amount: Optional[float] = Field(default=None, gt=0)
    issue_date: Optional[date] = None
    due_date: Optional[date] = None


class InvoiceIdsRequest(StoreModel):
    ids: list[str] = Field(default_factory=list)
