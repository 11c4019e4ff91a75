"""Invoicing: CRUD and mark-paid with automatic next-cycle invoices."""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from nursery.api.deps import AdminOnly, Snapshot, Store
from nursery.models.invoice import Invoice, InvoiceCreate, InvoiceIdsRequest, InvoiceStatus, InvoiceUpdate
from nursery.services.invoicing import mark_paid

router = APIRouter()


class MarkPaidResponse(BaseModel):
    status: str
    message: str
    paid_ids: list[str]
    skipped_ids: list[str]
    successor_ids: list[str]


@router.get("/")
async def list_invoices(snapshot: Snapshot, child_id: str | None = None, status: InvoiceStatus | None = None):
    items = snapshot.invoices
    if child_id:
        items = [i for i in items if i.child_id == child_id]
    if status:
        items = [i for i in items if i.status == status]
    return [i.to_api() for i in sorted(items, key=lambda i: i.due_date, reverse=True)]


@router.post("/", status_code=201)
async def create_invoice(data: InvoiceCreate, store: Store, snapshot: Snapshot):
    child = snapshot.child(data.child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    invoice = Invoice(
        child_id=child.id,
        child_name=child.name,
        amount=data.amount,
        issue_date=data.issue_date or snapshot.today,
        due_date=data.due_date,
        status=InvoiceStatus.UNPAID,
    )
    key = await store.push("invoices")
    await store.set(f"invoices/{key}", invoice.to_store())
    return {"id": key}


@router.patch("/{invoice_id}")
async def update_invoice(invoice_id: str, data: InvoiceUpdate, store: Store, snapshot: Snapshot):
    """Edit amount or dates; status only changes through mark-paid and overdue promotion."""
    invoice = next((i for i in snapshot.invoices if i.id == invoice_id), None)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    if invoice.status == InvoiceStatus.PAID:
        raise HTTPException(status_code=400, detail="Paid invoices cannot be edited")
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    updated = invoice.model_copy(update=changes)
    await store.update({f"invoices/{invoice_id}": updated.to_store()})
    return updated.to_api()


@router.post("/delete")
async def delete_invoices(body: InvoiceIdsRequest, store: Store, admin: AdminOnly):
    if not body.ids:
        raise HTTPException(status_code=400, detail="No invoices selected")
    await store.delete([f"invoices/{i}" for i in body.ids])
    return {"deleted": len(body.ids)}


@router.post("/mark-paid", response_model=MarkPaidResponse)
async def mark_invoices_paid(body: InvoiceIdsRequest, store: Store, snapshot: Snapshot, admin: AdminOnly):
    if not body.ids:
        raise HTTPException(status_code=400, detail="No invoices selected")
    outcome = await mark_paid(
        store, snapshot.invoices, body.ids, snapshot.today, snapshot.settings.next_due_date_strategy
    )
    return MarkPaidResponse(**vars(outcome))
