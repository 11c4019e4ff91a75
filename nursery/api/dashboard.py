from typing import Any, Dict

from fastapi import APIRouter

from nursery.api.deps import Snapshot
from nursery.services.reports import attendance_summary, attendance_trend, dashboard_stats, financial_summary

router = APIRouter()


@router.get("/stats")
async def get_admin_stats(snapshot: Snapshot) -> Dict[str, Any]:
    """Get overview statistics for the admin dashboard."""
    return dashboard_stats(snapshot)


@router.get("/reports")
async def get_reports(snapshot: Snapshot, days: int = 30) -> Dict[str, Any]:
    """Financial and attendance summaries with a daily attendance trend."""
    return {
        "counts": {"children": len(snapshot.children), "staff": len(snapshot.staff)},
        "finance": financial_summary(snapshot),
        "attendance": attendance_summary(snapshot),
        "trend": attendance_trend(snapshot, days=max(1, min(days, 365))),
    }
