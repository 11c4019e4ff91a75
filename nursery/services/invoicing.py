"""Invoice lifecycle: overdue promotion on load, mark-paid with successor invoices."""
import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Literal

from nursery.db import DataStore
from nursery.models.invoice import Invoice, InvoiceStatus
from nursery.models.settings import DueDateStrategy

logger = logging.getLogger(__name__)

MarkPaidStatus = Literal["success", "partial", "noop"]


def next_due_date(current: date, strategy: DueDateStrategy) -> date:
    """
    Due date of the next billing cycle: one calendar month after `current`,
    then the first or last day of that month depending on `strategy`.

    The month is advanced without overflowing into the month after it, so
    2024-01-31 moves to February, never to March.
    """
    year, month = (current.year + 1, 1) if current.month == 12 else (current.year, current.month + 1)
    if strategy == DueDateStrategy.LAST_DAY_NEXT_MONTH:
        return date(year, month, calendar.monthrange(year, month)[1])
    return date(year, month, 1)


def promote_overdue(invoices: Iterable[Invoice], today: date) -> dict[str, str]:
    """
    Multi-path updates that move Unpaid invoices whose due date is strictly
    before `today` to Overdue. Paid and Overdue invoices are never touched,
    so running it again on the result yields no updates.
    """
    updates: dict[str, str] = {}
    for invoice in invoices:
        if invoice.status == InvoiceStatus.UNPAID and invoice.due_date < today:
            updates[f"invoices/{invoice.id}/status"] = InvoiceStatus.OVERDUE.value
    return updates


@dataclass
class MarkPaidOutcome:
    status: MarkPaidStatus
    message: str
    paid_ids: list[str] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)
    successor_ids: list[str] = field(default_factory=list)


def successor_invoice(invoice: Invoice, today: date, strategy: DueDateStrategy) -> Invoice:
    return Invoice(
        child_id=invoice.child_id,
        child_name=invoice.child_name,
        amount=invoice.amount,
        issue_date=today,
        due_date=next_due_date(invoice.due_date, strategy),
        status=InvoiceStatus.UNPAID,
        payment_date=None,
    )


async def mark_paid(
    store: DataStore,
    invoices: list[Invoice],
    invoice_ids: list[str],
    today: date,
    strategy: DueDateStrategy,
) -> MarkPaidOutcome:
    """
    Mark the selected invoices Paid and create one successor per paid invoice.

    Every status change and every successor is written in a single atomic
    update. Ids that are unknown or already Paid are skipped; if nothing is
    left the outcome is "noop" and nothing is written.
    """
    by_id = {inv.id: inv for inv in invoices}
    selected = list(dict.fromkeys(invoice_ids))
    to_pay = [by_id[i] for i in selected if i in by_id and by_id[i].status != InvoiceStatus.PAID]
    skipped = [i for i in selected if i not in {inv.id for inv in to_pay}]

    if not to_pay:
        return MarkPaidOutcome(
            status="noop",
            message="The selected invoices are already paid.",
            skipped_ids=skipped,
        )

    updates: dict[str, object] = {}
    successor_ids: list[str] = []
    for invoice in to_pay:
        updates[f"invoices/{invoice.id}/status"] = InvoiceStatus.PAID.value
        updates[f"invoices/{invoice.id}/paymentDate"] = today.isoformat()
        key = await store.push("invoices")
        updates[f"invoices/{key}"] = successor_invoice(invoice, today, strategy).to_store()
        successor_ids.append(key)

    await store.update(updates)
    logger.info("Marked %d invoice(s) paid, created %d successor(s)", len(to_pay), len(successor_ids))

    paid_ids = [inv.id for inv in to_pay]
    if skipped:
        return MarkPaidOutcome(
            status="partial",
            message=f"{len(paid_ids)} invoice(s) marked paid; {len(skipped)} already paid or not found.",
            paid_ids=paid_ids,
            skipped_ids=skipped,
            successor_ids=successor_ids,
        )
    return MarkPaidOutcome(
        status="success",
        message="Invoices updated and next month's invoices created.",
        paid_ids=paid_ids,
        successor_ids=successor_ids,
    )
