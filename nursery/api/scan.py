"""QR scanner endpoint: check-in / check-out for children and staff."""
import json

from fastapi import APIRouter
from pydantic import BaseModel

from nursery.api.deps import AdminOnly, CurrentUser, Store
from nursery.services.clock import local_now
from nursery.services.scanner import process_scan

router = APIRouter()


class ScanRequest(BaseModel):
    code: str  # decoded QR text


@router.post("/")
async def scan(req: ScanRequest, user: CurrentUser, store: Store):
    """Always 200: rejections are reported in `message` with accepted=false."""
    outcome = await process_scan(store, req.code, local_now(), user)
    return {
        "message": outcome.message,
        "accepted": outcome.accepted,
        "action": outcome.action.value if outcome.action else None,
    }


@router.get("/nursery-code")
async def nursery_code(admin: AdminOnly):
    """Payload for the entrance QR code that staff scan to clock in and out."""
    return {"payload": json.dumps({"type": "nursery-check-in"})}
