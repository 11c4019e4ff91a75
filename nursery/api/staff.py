"""Staff management: CRUD, QR payloads and staff login accounts."""
import json
import uuid

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from nursery.api.deps import AdminOnly, Identity, Snapshot, Store
from nursery.models.staff import Staff, StaffCreate, StaffUpdate
from nursery.services.accounts import provision_staff_accounts

router = APIRouter()


class IdsRequest(BaseModel):
    ids: list[str] = Field(default_factory=list)


@router.get("/")
async def list_staff(snapshot: Snapshot):
    """List all staff members."""
    return [s.to_api() for s in sorted(snapshot.staff, key=lambda s: s.name.lower())]


@router.post("/", status_code=201)
async def create_staff(data: StaffCreate, store: Store):
    """Create a staff member with a fresh QR code id."""
    member = Staff(**data.model_dump(), qr_code_id=str(uuid.uuid4()))
    key = await store.push("staff")
    await store.set(f"staff/{key}", member.to_store())
    return {"id": key, "qrCodeId": member.qr_code_id}


@router.get("/{staff_id}")
async def get_staff(staff_id: str, snapshot: Snapshot):
    member = snapshot.staff_member(staff_id)
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return member.to_api()


@router.patch("/{staff_id}")
async def update_staff(staff_id: str, data: StaffUpdate, store: Store, snapshot: Snapshot):
    """Update staff details; qrCodeId and accountId are kept."""
    member = snapshot.staff_member(staff_id)
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    updated = member.model_copy(update=changes)
    await store.update({f"staff/{staff_id}": updated.to_store()})
    return updated.to_api()


@router.post("/delete")
async def delete_staff(body: IdsRequest, store: Store, admin: AdminOnly):
    if not body.ids:
        raise HTTPException(status_code=400, detail="No staff selected")
    await store.delete([f"staff/{i}" for i in body.ids])
    return {"deleted": len(body.ids)}


@router.get("/{staff_id}/qr")
async def staff_qr_payload(staff_id: str, snapshot: Snapshot):
    member = snapshot.staff_member(staff_id)
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return {"payload": json.dumps({"type": "staff", "id": member.qr_code_id}), "name": member.name}


@router.post("/accounts")
async def create_staff_accounts(body: IdsRequest, store: Store, identity: Identity, snapshot: Snapshot, admin: AdminOnly):
    """Create staff logins; the generated passwords are only returned here."""
    report = await provision_staff_accounts(store, identity, snapshot, body.ids)
    if report.eligible == 0:
        raise HTTPException(
            status_code=400,
            detail="No valid staff selected (an email and no existing account are required).",
        )
    return {
        "credentials": [vars(c) for c in report.credentials],
        "failures": [vars(f) for f in report.failures],
        "skipped_ids": report.skipped_ids,
    }
