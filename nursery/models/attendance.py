"""Daily attendance for children and staff: one record per person per day."""
from datetime import date
from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BeforeValidator, Field

from nursery.models.base import StoreModel


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"


_MERIDIEM_OFFSET = {"am": 0, "pm": 12, "ص": 0, "م": 12}
_BIDI_MARKS = dict.fromkeys(map(ord, "\u200e\u200f\u061c"))


def _from_twelve_hour(value):
    """Rewrite older rendered times ("08:15 AM", "٠١:٠٥ م") as 24-hour HH:MM."""
    if not isinstance(value, str):
        return value
    parts = value.translate(_BIDI_MARKS).split()
    if len(parts) != 2:
        return value
    clock, marker = parts
    offset = _MERIDIEM_OFFSET.get(marker.lower().rstrip("."))
    hours, sep, minutes = clock.partition(":")
    if offset is None or not sep or not hours.isdigit() or not minutes.isdigit():
        return value
    if not 1 <= int(hours) <= 12:
        return value
    return f"{int(hours) % 12 + offset:02d}:{int(minutes):02d}"


def _check_hhmm(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    hours, sep, minutes = value.partition(":")
    if not sep or len(hours) != 2 or len(minutes) != 2 or not (hours + minutes).isdigit() or not value.isascii():
        raise ValueError("time must be zero-padded HH:MM")
    if int(hours) > 23 or int(minutes) > 59:
        raise ValueError("time out of range")
    return value


ClockTime = Annotated[Optional[str], BeforeValidator(_from_twelve_hour), AfterValidator(_check_hhmm)]


class AttendanceRecord(StoreModel):
    """Child attendance at attendance/{id}. Times are 24-hour HH:MM."""

    id: str = ""
    child_id: str
    child_name: str = ""  # denormalized when written
    date: date
    check_in: ClockTime = None
    check_out: ClockTime = None
    status: AttendanceStatus = AttendanceStatus.PRESENT

    @property
    def subject_id(self) -> str:
        return self.child_id


class StaffAttendanceRecord(StoreModel):
    """Staff attendance at staffAttendance/{id}."""

    id: str = ""
    staff_id: str
    staff_name: str = ""
    date: date
    check_in: ClockTime = None
    check_out: ClockTime = None
    status: AttendanceStatus = AttendanceStatus.PRESENT

    @property
    def subject_id(self) -> str:
        return self.staff_id


class AttendanceEntry(StoreModel):
    """Manual attendance entry from the admin attendance sheet."""

    subject_id: str
    date: date
    check_in: ClockTime = None
    check_out: ClockTime = None


class AttendanceDeleteRequest(StoreModel):
    ids: list[str] = Field(default_factory=list)
