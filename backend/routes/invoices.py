"""
Numeris - Invoice Routes
Create / read / update / delete / issue / download, stats and item summary.
Every route is scoped to /invoice/{userID} and requires the owner's token.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse

from dependencies import (
    get_activity_logger,
    get_app_settings,
    get_invoice_repository,
    get_scheduler,
)
from models.activity import CREATE_INVOICE, DELETE_INVOICE, ISSUE_INVOICE, UPDATE_INVOICE
from models.invoice import InvoiceCreate, new_invoice
from routes.auth import get_owner_id
from services.invoice_pdf import generate_invoice_pdf

logger = logging.getLogger("invoices")

router = APIRouter(prefix="/invoice", tags=["Invoices"])


# ════════════════════════════════════════════════════════════════════════
# CRUD
# ════════════════════════════════════════════════════════════════════════

@router.post("/{userID}/create", status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
    activity=Depends(get_activity_logger),
):
    """New draft invoice, written to both collections."""
    invoice = new_invoice(owner_id, data)
    await invoices.add_new_invoice(owner_id, invoice)

    activity.record(owner_id, CREATE_INVOICE, {
        "invoice_id": invoice.invoice_id,
        "invoice_number": invoice.invoice_number,
        "total_amount_due": invoice.total_amount_due,
    })
    return {"message": "invoice created successfully", "invoice_id": invoice.invoice_id}


@router.get("/{userID}/get/{invoiceID}")
async def get_invoice(
    invoiceID: str,
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
):
    invoice = await invoices.find_by_id(owner_id, invoiceID)
    return {"invoice": invoice.model_dump()}


@router.get("/{userID}/all")
async def list_invoices(
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
):
    items = await invoices.find_all(owner_id)
    return {"invoices": [i.model_dump() for i in items], "count": len(items)}


@router.put("/{userID}/update/{invoiceID}")
async def update_invoice(
    invoiceID: str,
    data: InvoiceCreate,
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
    activity=Depends(get_activity_logger),
):
    """Replace an invoice that is not issued yet and not past due."""
    candidate = new_invoice(owner_id, data)
    updated = await invoices.update_before_due_date(owner_id, invoiceID, candidate)

    activity.record(owner_id, UPDATE_INVOICE, {
        "invoice_id": invoiceID,
        "total_amount_due": updated.total_amount_due,
    })
    return {"message": "invoice updated successfully", "invoice": updated.model_dump()}


@router.delete("/{userID}/delete/{invoiceID}")
async def delete_invoice(
    invoiceID: str,
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
    activity=Depends(get_activity_logger),
):
    await invoices.delete_invoice(owner_id, invoiceID)
    activity.record(owner_id, DELETE_INVOICE, {"invoice_id": invoiceID})
    return {"message": "invoice deleted successfully"}


# ════════════════════════════════════════════════════════════════════════
# LIFECYCLE
# ════════════════════════════════════════════════════════════════════════

@router.post("/{userID}/send/{invoiceID}")
async def send_invoice(
    invoiceID: str,
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
    activity=Depends(get_activity_logger),
):
    """
    Mark invoice as issued (draft / pending / overdue -> issued).
    An invoice in any other state is returned unchanged with issued=false.
    """
    await invoices.find_by_id(owner_id, invoiceID)
    modified = await invoices.update_status_to_issued(owner_id, invoiceID)
    invoice = await invoices.find_by_id(owner_id, invoiceID)

    if modified:
        activity.record(owner_id, ISSUE_INVOICE, {"invoice_id": invoiceID})
        message = "invoice issued successfully"
    else:
        message = f"invoice cannot be issued from status {invoice.status}"
    return {"message": message, "issued": bool(modified), "invoice": invoice.model_dump()}


@router.get("/{userID}/download/{invoiceID}")
async def download_invoice(
    invoiceID: str,
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
    settings=Depends(get_app_settings),
    scheduler=Depends(get_scheduler),
):
    """Render the invoice to PDF; the local copy is removed after a delay."""
    invoice = await invoices.find_by_id(owner_id, invoiceID)

    path = Path(settings.download_dir) / f"{invoice.invoice_id}.pdf"
    await run_in_threadpool(generate_invoice_pdf, invoice, str(path))
    scheduler.schedule_removal(str(path), settings.download_ttl_seconds)

    return FileResponse(
        str(path),
        media_type="application/pdf",
        filename=f"invoice_{invoice.invoice_number}.pdf",
    )


# ════════════════════════════════════════════════════════════════════════
# SUMMARIES
# ════════════════════════════════════════════════════════════════════════

@router.get("/{userID}/stats")
async def invoice_stats(
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
):
    summary = await invoices.stat_summary(owner_id)
    return summary.model_dump()


@router.get("/{userID}/items/{invoiceID}")
async def invoice_items(
    invoiceID: str,
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
):
    items = await invoices.item_summary(owner_id, invoiceID)
    return {"items": [i.model_dump() for i in items], "count": len(items)}


@router.get("/{userID}/ready-to-issue")
async def ready_to_issue(
    owner_id: str = Depends(get_owner_id),
    invoices=Depends(get_invoice_repository),
):
    """Draft / pending / overdue invoices due to be issued within 30 days."""
    items = await invoices.ready_to_issue(owner_id)
    return {"invoices": [i.model_dump() for i in items], "count": len(items)}
