"""Dashboard figures, financial/attendance summaries and attendance exports."""
import io
from datetime import date, timedelta
from typing import Any, Literal

import pandas as pd

from nursery.models.attendance import AttendanceRecord, AttendanceStatus, StaffAttendanceRecord
from nursery.models.invoice import InvoiceStatus
from nursery.services.clock import format_display_time
from nursery.services.snapshot import NurserySnapshot

ExportFormat = Literal["csv", "excel"]


def dashboard_stats(snapshot: NurserySnapshot, recent: int = 5) -> dict[str, Any]:
    today = snapshot.today
    todays = [a for a in snapshot.attendance if a.date == today]
    present_today = sum(1 for a in todays if a.status == AttendanceStatus.PRESENT)
    open_invoices = sum(
        1 for i in snapshot.invoices if i.status in (InvoiceStatus.UNPAID, InvoiceStatus.OVERDUE)
    )
    # Stored check-in times are HH:MM, so string order is chronological.
    latest = sorted(todays, key=lambda a: a.check_in or "", reverse=True)[:recent]
    return {
        "date": today.isoformat(),
        "counts": {
            "children": len(snapshot.children),
            "staff": len(snapshot.staff),
            "present_today": present_today,
            "open_invoices": open_invoices,
        },
        "recent_check_ins": [
            {
                "child_id": a.child_id,
                "child_name": a.child_name,
                "check_in": a.check_in,
                "check_in_display": format_display_time(a.check_in),
            }
            for a in latest
        ],
        "weekly": attendance_trend(snapshot, days=7),
    }


def financial_summary(snapshot: NurserySnapshot) -> dict[str, Any]:
    """Paid vs. outstanding (Unpaid and Overdue) totals and counts."""
    summary = {"total_paid": 0.0, "total_unpaid": 0.0, "paid_count": 0, "unpaid_count": 0, "overdue_count": 0}
    for invoice in snapshot.invoices:
        if invoice.status == InvoiceStatus.PAID:
            summary["total_paid"] += invoice.amount
            summary["paid_count"] += 1
        else:
            summary["total_unpaid"] += invoice.amount
            summary["unpaid_count"] += 1
            if invoice.status == InvoiceStatus.OVERDUE:
                summary["overdue_count"] += 1
    return summary


def attendance_trend(snapshot: NurserySnapshot, days: int = 30) -> list[dict[str, Any]]:
    """Present/absent child counts per day for the `days` days ending today."""
    start = snapshot.today - timedelta(days=days - 1)
    present: dict[date, int] = {start + timedelta(days=i): 0 for i in range(days)}
    for record in snapshot.attendance:
        if record.date in present and record.status == AttendanceStatus.PRESENT:
            present[record.date] += 1
    total = len(snapshot.children)
    return [
        {"date": d.isoformat(), "present": count, "absent": max(0, total - count)}
        for d, count in present.items()
    ]


def attendance_summary(snapshot: NurserySnapshot) -> dict[str, Any]:
    days_recorded = len({a.date for a in snapshot.attendance})
    total_present = sum(1 for a in snapshot.attendance if a.status == AttendanceStatus.PRESENT)
    average = round(total_present / days_recorded, 1) if days_recorded else 0.0
    return {
        "days_recorded": days_recorded,
        "total_present": total_present,
        # Children without a record on a recorded day count as absent.
        "total_absent": max(0, len(snapshot.children) * days_recorded - total_present),
        "average_daily_attendance": average,
    }


def attendance_frame(
    records: list[AttendanceRecord] | list[StaffAttendanceRecord],
    from_date: date,
    to_date: date,
) -> pd.DataFrame:
    rows = []
    for record in records:
        if not (from_date <= record.date <= to_date):
            continue
        if isinstance(record, AttendanceRecord):
            subject_id, name = record.child_id, record.child_name
        else:
            subject_id, name = record.staff_id, record.staff_name
        rows.append(
            {
                "Date": record.date.isoformat(),
                "ID": subject_id,
                "Name": name,
                "Check In": format_display_time(record.check_in),
                "Check Out": format_display_time(record.check_out),
                "Status": record.status.value,
            }
        )
    df = pd.DataFrame(rows, columns=["Date", "ID", "Name", "Check In", "Check Out", "Status"])
    return df.sort_values(["Date", "Name"], ignore_index=True)


def export_attendance(df: pd.DataFrame, fmt: ExportFormat) -> bytes:
    if fmt == "csv":
        stream = io.StringIO()
        df.to_csv(stream, index=False)
        return stream.getvalue().encode("utf-8")
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Attendance")
    return output.getvalue()
