"""Invoices: create, edit, number, render and export.

These routes are the caller of the billing core, so input validation
happens here before anything is computed.
"""
import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmabill.api.deps import get_db
from pharmabill.core.exceptions import BusinessError, DuplicateInvoiceNumberError, InvoiceNotFoundError
from pharmabill.schemas.invoice import Invoice, InvoiceCreate, InvoiceUpdate
from pharmabill.services import storage_service
from pharmabill.services.export_service import export_invoices_csv
from pharmabill.services.invoice_service import build_invoice, recalculate_invoice, snapshot_item
from pharmabill.services.numbering import next_invoice_number
from pharmabill.services.pdf_service import RenderMode, generate_invoice_pdf

logger = logging.getLogger(__name__)

router = APIRouter()


def _validate(data: InvoiceUpdate) -> None:
    if not data.customer.name or not data.customer.name.strip():
        raise BusinessError.bad_request("Please enter Customer / Company Name")
    if not data.items:
        raise BusinessError.bad_request("Please add at least one item")
    for line in data.items:
        if not line.product.name.strip():
            raise BusinessError.bad_request("Every item needs a name")
        if line.quantity <= 0:
            raise BusinessError.bad_request(f"Quantity must be positive for {line.product.name}")
        if line.product.rate < 0:
            raise BusinessError.bad_request(f"Rate cannot be negative for {line.product.name}")


def _lines(data: InvoiceUpdate) -> list:
    return [snapshot_item(line.product, line.quantity, line.discount_percent) for line in data.items]


def _load(db: Session, invoice_id: int) -> Invoice:
    try:
        return storage_service.get_invoice(db, invoice_id)
    except InvoiceNotFoundError as e:
        raise BusinessError.not_found("Invoice", str(e))


def _save(db: Session, invoice: Invoice) -> Invoice:
    try:
        return storage_service.save_invoice(db, invoice)
    except DuplicateInvoiceNumberError as e:
        raise BusinessError.conflict(str(e))


@router.get("", response_model=List[Invoice])
def list_invoices(
    search: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """All invoices, optionally filtered by number, customer name or customer GSTIN."""
    invoices = storage_service.list_invoices(db)
    if search:
        term = search.lower()
        invoices = [
            inv for inv in invoices
            if term in inv.invoice_number.lower()
            or term in inv.customer_name.lower()
            or term in (inv.customer_gst or "").lower()
        ]
    return invoices


@router.get("/next-number")
def get_next_invoice_number(db: Session = Depends(get_db)):
    return {"invoice_number": next_invoice_number(storage_service.list_invoices(db))}


@router.get("/export")
def export_invoices(db: Session = Depends(get_db)):
    """Export all invoices as CSV file, one row per line item."""
    content = export_invoices_csv(storage_service.list_invoices(db))
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=invoices_{date.today()}.csv"},
    )


@router.post("", response_model=Invoice, status_code=201)
def create_invoice(data: InvoiceCreate, db: Session = Depends(get_db)):
    _validate(data)
    invoice_number = data.invoice_number or next_invoice_number(storage_service.list_invoices(db))
    invoice = build_invoice(
        invoice_number=invoice_number,
        customer=data.customer,
        items=_lines(data),
        payment_mode=data.payment_mode,
        invoice_date=data.invoice_date,
        notes=data.notes,
    )
    return _save(db, invoice)


@router.get("/{invoice_id}", response_model=Invoice)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return _load(db, invoice_id)


@router.put("/{invoice_id}", response_model=Invoice)
def update_invoice(invoice_id: int, data: InvoiceUpdate, db: Session = Depends(get_db)):
    """Edit an invoice. Totals are recomputed; the invoice number never changes."""
    _validate(data)
    existing = _load(db, invoice_id)
    changes = {"payment_mode": data.payment_mode, "notes": data.notes}
    if data.invoice_date:
        changes["invoice_date"] = data.invoice_date
    invoice = recalculate_invoice(existing, items=_lines(data), customer=data.customer, **changes)
    return _save(db, invoice)


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: int, db: Session = Depends(get_db)):
    try:
        storage_service.delete_invoice(db, invoice_id)
    except InvoiceNotFoundError as e:
        raise BusinessError.not_found("Invoice", str(e))
    return {"message": "Invoice deleted"}


@router.get("/{invoice_id}/pdf")
def render_invoice_pdf(
    invoice_id: int,
    mode: RenderMode = Query(RenderMode.PRINT),
    db: Session = Depends(get_db),
):
    """Print (download) or preview (inline) the invoice PDF."""
    invoice = _load(db, invoice_id)
    app_settings = storage_service.load_settings(db)
    try:
        rendered = generate_invoice_pdf(invoice, app_settings, mode)
    except Exception as e:
        raise BusinessError.server_error(e)
    return Response(
        content=rendered.content,
        media_type=rendered.media_type,
        headers={"Content-Disposition": rendered.disposition},
    )
