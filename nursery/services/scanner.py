"""QR check-in/out: decide the scan action and the attendance write for one scan."""
import logging
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from nursery.db import DataStore
from nursery.errors import StoreError
from nursery.models.attendance import AttendanceRecord, AttendanceStatus, StaffAttendanceRecord
from nursery.models.settings import NurserySettings
from nursery.models.user import CurrentUser, UserRole
from nursery.services.clock import clock_time, format_clock
from nursery.services.snapshot import NurserySnapshot, load_snapshot

logger = logging.getLogger(__name__)

INVALID_CODE = "Invalid QR code or you are not authorized to scan it."
SCAN_FAILED = "Could not record the scan. Please try again."


class ScanAction(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"


class ChildCode(BaseModel):
    type: Literal["child"]
    id: str


class StaffCode(BaseModel):
    type: Literal["staff"]
    id: str


class NurseryCheckInCode(BaseModel):
    """Code posted at the nursery entrance; staff scan it with their own session."""

    type: Literal["nursery-check-in"]


ScanPayload = Annotated[Union[ChildCode, StaffCode, NurseryCheckInCode], Field(discriminator="type")]

_payload_adapter = TypeAdapter(ScanPayload)


def parse_payload(text: str) -> Optional[ScanPayload]:
    """Decode scanned JSON text; None for anything that is not a known code."""
    try:
        return _payload_adapter.validate_json(text)
    except ValidationError:
        return None


@dataclass(frozen=True)
class NewAttendance:
    collection: Literal["attendance", "staffAttendance"]
    record: Union[AttendanceRecord, StaffAttendanceRecord]


@dataclass(frozen=True)
class CheckOutUpdate:
    collection: Literal["attendance", "staffAttendance"]
    record_id: str
    check_out: str


AttendanceMutation = Union[NewAttendance, CheckOutUpdate]


@dataclass(frozen=True)
class ScanOutcome:
    message: str
    accepted: bool = False
    action: Optional[ScanAction] = None
    mutation: Optional[AttendanceMutation] = None


def classify_scan_time(t: time, settings: NurserySettings) -> Optional[ScanAction]:
    """Check-in window wins, then check-out; both bounds inclusive."""
    if settings.check_in_start_time <= t <= settings.check_in_end_time:
        return ScanAction.CHECK_IN
    if settings.check_out_start_time <= t <= settings.check_out_end_time:
        return ScanAction.CHECK_OUT
    return None


def _outside_windows_message(settings: NurserySettings) -> str:
    return (
        "Scanning is not available now. "
        f"Check-in hours are {format_clock(settings.check_in_start_time)}-{format_clock(settings.check_in_end_time)} "
        f"and check-out hours are {format_clock(settings.check_out_start_time)}-{format_clock(settings.check_out_end_time)}."
    )


@dataclass(frozen=True)
class _Subject:
    id: str
    name: str
    collection: Literal["attendance", "staffAttendance"]
    is_self: bool = False


def _resolve_subject(
    payload: ScanPayload,
    snapshot: NurserySnapshot,
    caller_role: Optional[UserRole],
    caller_link_id: Optional[str],
) -> Union[_Subject, ScanOutcome]:
    if isinstance(payload, ChildCode):
        child = snapshot.child_by_qr(payload.id)
        if not child:
            return ScanOutcome("Child not found.")
        return _Subject(child.id, child.name, "attendance")
    if isinstance(payload, StaffCode):
        member = snapshot.staff_by_qr(payload.id)
        if not member:
            return ScanOutcome("Staff member not found.")
        return _Subject(member.id, member.name, "staffAttendance")
    if isinstance(payload, NurseryCheckInCode) and caller_role == UserRole.STAFF:
        member = snapshot.staff_member(caller_link_id) if caller_link_id else None
        if not member:
            return ScanOutcome("Error: your staff record was not found.")
        return _Subject(member.id, member.name, "staffAttendance", is_self=True)
    return ScanOutcome(INVALID_CODE)


def resolve_scan(
    payload: Optional[ScanPayload],
    now: datetime,
    settings: NurserySettings,
    snapshot: NurserySnapshot,
    caller_role: Optional[UserRole] = None,
    caller_link_id: Optional[str] = None,
) -> ScanOutcome:
    """
    Decide what one scan does. `now` is nursery-local time.

    Returns an outcome carrying a user-facing message and at most one
    attendance mutation; rejections never carry a mutation and are never
    raised.
    """
    action = classify_scan_time(clock_time(now), settings)
    if action is None:
        return ScanOutcome(_outside_windows_message(settings))
    if payload is None:
        return ScanOutcome(INVALID_CODE)

    subject = _resolve_subject(payload, snapshot, caller_role, caller_link_id)
    if isinstance(subject, ScanOutcome):
        return subject

    today = now.date()
    stamp = format_clock(now)
    if subject.collection == "attendance":
        existing = snapshot.child_attendance_on(subject.id, today)
    else:
        existing = snapshot.staff_attendance_on(subject.id, today)
    name = subject.name

    if action == ScanAction.CHECK_IN:
        if existing:
            if subject.is_self:
                return ScanOutcome(f"Hello {name}! You have already checked in.", action=action)
            return ScanOutcome(f"{name} has already checked in today.", action=action)
        if subject.collection == "attendance":
            record = AttendanceRecord(
                child_id=subject.id, child_name=name, date=today,
                check_in=stamp, check_out=None, status=AttendanceStatus.PRESENT,
            )
        else:
            record = StaffAttendanceRecord(
                staff_id=subject.id, staff_name=name, date=today,
                check_in=stamp, check_out=None, status=AttendanceStatus.PRESENT,
            )
        message = f"You have checked in successfully, {name}." if subject.is_self else f"{name} checked in successfully."
        return ScanOutcome(message, accepted=True, action=action, mutation=NewAttendance(subject.collection, record))

    if not existing:
        if subject.is_self:
            return ScanOutcome(f"You must check in first, {name}.", action=action)
        return ScanOutcome(f"{name} has not checked in yet; check in first.", action=action)
    if existing.check_out:
        if subject.is_self:
            return ScanOutcome(f"Welcome back {name}! You have already checked out.", action=action)
        return ScanOutcome(f"{name} has already checked out today.", action=action)
    message = f"You have checked out successfully, {name}." if subject.is_self else f"{name} checked out successfully."
    return ScanOutcome(
        message, accepted=True, action=action,
        mutation=CheckOutUpdate(subject.collection, existing.id, stamp),
    )


async def apply_mutation(store: DataStore, mutation: AttendanceMutation) -> str:
    """Persist a scan's mutation as one write; returns the record id."""
    if isinstance(mutation, NewAttendance):
        key = await store.push(mutation.collection)
        await store.update({f"{mutation.collection}/{key}": mutation.record.to_store()})
        return key
    await store.update({f"{mutation.collection}/{mutation.record_id}/checkOut": mutation.check_out})
    return mutation.record_id


async def process_scan(store: DataStore, text: str, now: datetime, caller: CurrentUser) -> ScanOutcome:
    """Load a fresh snapshot, resolve the scan and write its mutation."""
    try:
        snapshot = await load_snapshot(store, now.date())
        outcome = resolve_scan(
            parse_payload(text), now, snapshot.settings, snapshot,
            caller_role=caller.role, caller_link_id=caller.link_id,
        )
        if outcome.mutation is not None:
            await apply_mutation(store, outcome.mutation)
        return outcome
    except StoreError:
        logger.exception("Error handling QR scan")
        return ScanOutcome(SCAN_FAILED)
