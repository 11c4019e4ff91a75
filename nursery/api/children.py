"""Children: CRUD, QR payloads and guardian accounts."""
import json
import uuid

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from nursery.api.deps import AdminOnly, Identity, Snapshot, Store
from nursery.models.child import Child, ChildCreate, ChildUpdate
from nursery.services.accounts import provision_parent_accounts

router = APIRouter()


class IdsRequest(BaseModel):
    ids: list[str] = Field(default_factory=list)


@router.get("/")
async def list_children(snapshot: Snapshot):
    return [c.to_api() for c in sorted(snapshot.children, key=lambda c: c.name.lower())]


@router.post("/", status_code=201)
async def create_child(data: ChildCreate, store: Store):
    payload = data.model_dump()
    payload["guardian"]["account_id"] = None
    child = Child(**payload, qr_code_id=str(uuid.uuid4()))
    key = await store.push("children")
    await store.set(f"children/{key}", child.to_store())
    return {"id": key, "qrCodeId": child.qr_code_id}


@router.get("/{child_id}")
async def get_child(child_id: str, snapshot: Snapshot):
    child = snapshot.child(child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    return child.to_api()


@router.patch("/{child_id}")
async def update_child(child_id: str, data: ChildUpdate, store: Store, snapshot: Snapshot):
    child = snapshot.child(child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    changes = data.model_dump(exclude_unset=True)
    if "guardian" in changes and changes["guardian"] is not None:
        # account_id is only written by account provisioning.
        changes["guardian"]["account_id"] = child.guardian.account_id
    merged = {**child.model_dump(), **{k: v for k, v in changes.items() if v is not None}}
    updated = Child.model_validate(merged)
    await store.update({f"children/{child_id}": updated.to_store()})
    return updated.to_api()


@router.post("/delete")
async def delete_children(body: IdsRequest, store: Store, admin: AdminOnly):
    if not body.ids:
        raise HTTPException(status_code=400, detail="No children selected")
    await store.delete([f"children/{i}" for i in body.ids])
    return {"deleted": len(body.ids)}


@router.get("/{child_id}/qr")
async def child_qr_payload(child_id: str, snapshot: Snapshot):
    """JSON text to encode in the child's printed QR code."""
    child = snapshot.child(child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    return {"payload": json.dumps({"type": "child", "id": child.qr_code_id}), "name": child.name}


@router.post("/accounts")
async def create_parent_accounts(body: IdsRequest, store: Store, identity: Identity, snapshot: Snapshot, admin: AdminOnly):
    """Create guardian logins; the generated passwords are only returned here."""
    report = await provision_parent_accounts(store, identity, snapshot, body.ids)
    if report.eligible == 0:
        raise HTTPException(
            status_code=400,
            detail="No valid children selected (guardian needs an email and no existing account).",
        )
    return {
        "credentials": [vars(c) for c in report.credentials],
        "failures": [vars(f) for f in report.failures],
        "skipped_ids": report.skipped_ids,
    }
