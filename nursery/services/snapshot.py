"""Session snapshot of the nursery's data, loaded wholesale from the store.

A snapshot is stale as soon as anything is written; callers reload it
instead of patching it.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Type, TypeVar

from pydantic import ValidationError

from nursery.db import DataStore
from nursery.errors import InvalidSettingsError
from nursery.models.attendance import AttendanceRecord, StaffAttendanceRecord
from nursery.models.base import StoreModel
from nursery.models.child import Child
from nursery.models.invoice import Invoice, InvoiceStatus
from nursery.models.settings import SETTINGS_PATH, NurserySettings
from nursery.models.staff import Staff
from nursery.services.invoicing import promote_overdue

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=StoreModel)


def parse_collection(model: Type[M], value: Any) -> list[M]:
    """Turn a `{key: node}` collection into models with `id` set to the key."""
    if not value:
        return []
    items: list[M] = []
    for key, node in value.items():
        if not isinstance(node, dict):
            continue
        try:
            items.append(model.model_validate({**node, "id": key}))
        except ValidationError as e:
            logger.warning("Skipping malformed %s %s: %s", model.__name__, key, e)
    return items


@dataclass
class NurserySnapshot:
    today: date
    settings: NurserySettings
    children: list[Child] = field(default_factory=list)
    staff: list[Staff] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)
    attendance: list[AttendanceRecord] = field(default_factory=list)
    staff_attendance: list[StaffAttendanceRecord] = field(default_factory=list)

    def child(self, child_id: str) -> Optional[Child]:
        return next((c for c in self.children if c.id == child_id), None)

    def staff_member(self, staff_id: str) -> Optional[Staff]:
        return next((s for s in self.staff if s.id == staff_id), None)

    def child_by_qr(self, qr_code_id: str) -> Optional[Child]:
        return next((c for c in self.children if c.qr_code_id == qr_code_id), None)

    def staff_by_qr(self, qr_code_id: str) -> Optional[Staff]:
        return next((s for s in self.staff if s.qr_code_id == qr_code_id), None)

    def child_attendance_on(self, child_id: str, day: date) -> Optional[AttendanceRecord]:
        return next((a for a in self.attendance if a.child_id == child_id and a.date == day), None)

    def staff_attendance_on(self, staff_id: str, day: date) -> Optional[StaffAttendanceRecord]:
        return next((a for a in self.staff_attendance if a.staff_id == staff_id and a.date == day), None)


async def load_settings(store: DataStore) -> NurserySettings:
    """Read settings/nursery, writing the defaults the first time it is missing."""
    raw = await store.get(SETTINGS_PATH)
    if raw:
        try:
            return NurserySettings.model_validate(raw)
        except ValidationError as e:
            logger.warning("Stored nursery settings are invalid: %s", e)
            raise InvalidSettingsError("settings/nursery failed validation; save the settings again") from e
    defaults = NurserySettings()
    await store.set(SETTINGS_PATH, defaults.to_store())
    logger.info("Nursery settings were missing; stored defaults")
    return defaults


async def load_snapshot(store: DataStore, today: date) -> NurserySnapshot:
    """
    Fetch every collection, promote past-due Unpaid invoices to Overdue (one
    atomic write) and return the snapshot as it is after that write.
    """
    children_raw, staff_raw, invoices_raw, attendance_raw, staff_attendance_raw = await asyncio.gather(
        store.get("children"),
        store.get("staff"),
        store.get("invoices"),
        store.get("attendance"),
        store.get("staffAttendance"),
    )
    nursery_settings = await load_settings(store)

    invoices = parse_collection(Invoice, invoices_raw)
    overdue = promote_overdue(invoices, today)
    if overdue:
        await store.update(overdue)
        logger.info("Promoted %d invoice(s) to overdue", len(overdue))
        invoices = [
            inv.model_copy(update={"status": InvoiceStatus.OVERDUE})
            if f"invoices/{inv.id}/status" in overdue
            else inv
            for inv in invoices
        ]

    return NurserySnapshot(
        today=today,
        settings=nursery_settings,
        children=parse_collection(Child, children_raw),
        staff=parse_collection(Staff, staff_raw),
        invoices=invoices,
        attendance=parse_collection(AttendanceRecord, attendance_raw),
        staff_attendance=parse_collection(StaffAttendanceRecord, staff_attendance_raw),
    )
