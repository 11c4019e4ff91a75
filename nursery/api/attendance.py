"""Daily attendance sheets for children and staff, manual entries and exports."""
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from nursery.api.deps import Snapshot, Store
from nursery.models.attendance import (
    AttendanceDeleteRequest,
    AttendanceEntry,
    AttendanceRecord,
    AttendanceStatus,
    StaffAttendanceRecord,
)
from nursery.services.clock import format_display_time
from nursery.services.reports import attendance_frame, export_attendance

router = APIRouter()

Kind = Literal["children", "staff"]
_COLLECTION = {"children": "attendance", "staff": "staffAttendance"}


def _parse_day(value: Optional[str], default: date) -> date:
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format (YYYY-MM-DD)")


def _row(subject_id: str, name: str, record) -> dict:
    return {
        "subject_id": subject_id,
        "name": name,
        "record_id": record.id if record else None,
        "check_in": record.check_in if record else None,
        "check_out": record.check_out if record else None,
        "check_in_display": format_display_time(record.check_in) if record else "",
        "check_out_display": format_display_time(record.check_out) if record else "",
        "status": (record.status if record else AttendanceStatus.ABSENT).value,
    }


@router.get("/children")
async def children_sheet(snapshot: Snapshot, date_str: Optional[str] = Query(None, alias="date")):
    """Every child for the day; children without a record show as Absent."""
    day = _parse_day(date_str, snapshot.today)
    return {
        "date": day.isoformat(),
        "rows": [
            _row(c.id, c.name, snapshot.child_attendance_on(c.id, day))
            for c in sorted(snapshot.children, key=lambda c: c.name.lower())
        ],
    }


@router.get("/staff")
async def staff_sheet(snapshot: Snapshot, date_str: Optional[str] = Query(None, alias="date")):
    day = _parse_day(date_str, snapshot.today)
    return {
        "date": day.isoformat(),
        "rows": [
            _row(s.id, s.name, snapshot.staff_attendance_on(s.id, day))
            for s in sorted(snapshot.staff, key=lambda s: s.name.lower())
        ],
    }


@router.put("/{kind}")
async def save_entry(kind: Kind, entry: AttendanceEntry, store: Store, snapshot: Snapshot):
    """Create or update the single record for (subject, date)."""
    status = AttendanceStatus.PRESENT if entry.check_in else AttendanceStatus.ABSENT
    collection = _COLLECTION[kind]
    if kind == "children":
        subject = snapshot.child(entry.subject_id)
        existing = snapshot.child_attendance_on(entry.subject_id, entry.date)
    else:
        subject = snapshot.staff_member(entry.subject_id)
        existing = snapshot.staff_attendance_on(entry.subject_id, entry.date)
    if not subject:
        raise HTTPException(status_code=404, detail="Child not found" if kind == "children" else "Staff member not found")

    if existing:
        record_id = existing.id
        record = existing.model_copy(update={"check_in": entry.check_in, "check_out": entry.check_out, "status": status})
    else:
        record_id = await store.push(collection)
        if kind == "children":
            record = AttendanceRecord(
                child_id=subject.id, child_name=subject.name, date=entry.date,
                check_in=entry.check_in, check_out=entry.check_out, status=status,
            )
        else:
            record = StaffAttendanceRecord(
                staff_id=subject.id, staff_name=subject.name, date=entry.date,
                check_in=entry.check_in, check_out=entry.check_out, status=status,
            )
    await store.update({f"{collection}/{record_id}": record.to_store()})
    return {"id": record_id, **record.to_store()}


@router.post("/{kind}/delete")
async def delete_records(kind: Kind, body: AttendanceDeleteRequest, store: Store):
    if not body.ids:
        raise HTTPException(status_code=400, detail="No records selected")
    await store.delete([f"{_COLLECTION[kind]}/{i}" for i in body.ids])
    return {"deleted": len(body.ids)}


@router.get("/report")
async def download_attendance_report(
    snapshot: Snapshot,
    from_date: str,
    to_date: str,
    kind: Kind = "children",
    format: str = Query("csv", enum=["csv", "excel"]),
):
    """Download attendance for a date range as CSV or Excel."""
    d_from = _parse_day(from_date, snapshot.today)
    d_to = _parse_day(to_date, snapshot.today)
    records = snapshot.attendance if kind == "children" else snapshot.staff_attendance
    df = attendance_frame(records, d_from, d_to)
    if df.empty:
        raise HTTPException(status_code=404, detail="No records found for the given criteria")

    filename = f"attendance_{kind}_{from_date}_{to_date}"
    if format == "csv":
        return StreamingResponse(
            iter([export_attendance(df, "csv")]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}.csv"},
        )
    return StreamingResponse(
        iter([export_attendance(df, "excel")]),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}.xlsx"},
    )
