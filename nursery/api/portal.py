"""Parent and staff portals: the caller's own child or staff record."""
from datetime import date, timedelta
from typing import Literal

from fastapi import APIRouter, HTTPException

from nursery.api.deps import ParentOnly, Snapshot, StaffOnly
from nursery.models.attendance import AttendanceStatus
from nursery.models.invoice import InvoiceStatus
from nursery.services.clock import format_display_time

router = APIRouter()

Period = Literal["this_month", "last_month", "all_time"]


def in_period(day: date, period: Period, today: date) -> bool:
    """this_month is open-ended from the 1st; last_month is the whole previous month."""
    first_this_month = today.replace(day=1)
    if period == "this_month":
        return day >= first_this_month
    if period == "last_month":
        last_month_end = first_this_month - timedelta(days=1)
        return last_month_end.replace(day=1) <= day <= last_month_end
    return True


def _attendance_rows(records) -> list[dict]:
    rows = []
    for r in sorted(records, key=lambda r: r.date, reverse=True):
        rows.append(
            {
                **r.to_api(),
                "checkInDisplay": format_display_time(r.check_in),
                "checkOutDisplay": format_display_time(r.check_out),
            }
        )
    return rows


def _days_present(records) -> int:
    return sum(1 for r in records if r.status == AttendanceStatus.PRESENT)


@router.get("/parent")
async def parent_portal(user: ParentOnly, snapshot: Snapshot, period: Period = "all_time"):
    """The guardian's child with attendance and invoices for the period (invoices by issue date)."""
    child = snapshot.child(user.link_id)
    if not child:
        raise HTTPException(status_code=404, detail="Linked child not found")
    attendance = [
        a for a in snapshot.attendance
        if a.child_id == child.id and in_period(a.date, period, snapshot.today)
    ]
    invoices = sorted(
        (i for i in snapshot.invoices if i.child_id == child.id and in_period(i.issue_date, period, snapshot.today)),
        key=lambda i: i.due_date,
        reverse=True,
    )
    return {
        "child": child.to_api(),
        "period": period,
        "days_present": _days_present(attendance),
        "total_paid": sum(i.amount for i in invoices if i.status == InvoiceStatus.PAID),
        "attendance": _attendance_rows(attendance),
        "invoices": [i.to_api() for i in invoices],
    }


@router.get("/staff")
async def staff_portal(user: StaffOnly, snapshot: Snapshot, period: Period = "all_time"):
    """The staff member's profile, today's record and attendance for the period."""
    member = snapshot.staff_member(user.link_id)
    if not member:
        raise HTTPException(status_code=404, detail="Linked staff record not found")
    today = snapshot.staff_attendance_on(member.id, snapshot.today)
    attendance = [
        a for a in snapshot.staff_attendance
        if a.staff_id == member.id and in_period(a.date, period, snapshot.today)
    ]
    windows = snapshot.settings.to_api()
    return {
        "staff": member.to_api(),
        "today": today.to_api() if today else None,
        "period": period,
        "days_present": _days_present(attendance),
        "attendance": _attendance_rows(attendance),
        "check_in_window": [windows["checkInStartTime"], windows["checkInEndTime"]],
        "check_out_window": [windows["checkOutStartTime"], windows["checkOutEndTime"]],
    }
