"""Invoice assembly. Turns customer and product snapshots into a computed Invoice.

No side effects and no validation: the HTTP layer checks customer name and
line count before calling in here.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from pharmabill.schemas.catalog import Customer, Product
from pharmabill.schemas.invoice import Invoice, InvoiceItem, PaymentMode
from pharmabill.services.calculations import calculate_invoice_totals, calculate_line_amounts

logger = logging.getLogger(__name__)

# Changing any of these on a line requires recomputing its tax and total.
FINANCIAL_FIELDS = ("quantity", "rate", "discount_percent", "gst_rate")


def calculate_line_item(item: InvoiceItem) -> InvoiceItem:
    """Return a copy of the line with tax_amount and total_amount recomputed."""
    amounts = calculate_line_amounts(item.rate, item.quantity, item.gst_rate, item.discount_percent)
    return item.model_copy(update={
        "tax_amount": amounts["tax_amount"],
        "total_amount": amounts["total_amount"],
    })


def update_line_item(item: InvoiceItem, **changes) -> InvoiceItem:
    """Apply field edits to one line. Sibling lines are never touched."""
    updated = InvoiceItem.model_validate({**item.model_dump(), **changes})
    if any(field in changes for field in FINANCIAL_FIELDS):
        updated = calculate_line_item(updated)
    return updated


def snapshot_item(product: Product, quantity=1, discount_percent=0) -> InvoiceItem:
    """Copy a catalog product onto a new invoice line.

    Later catalog edits don't reach the line; it keeps the values seen at sale time.
    """
    item = InvoiceItem(
        product_id=product.id,
        name=product.name,
        category=product.category,
        brand=product.brand,
        batch_number=product.batch_number,
        expiry_date=product.expiry_date,
        pack_size=product.pack_size,
        hsn_code=product.hsn_code,
        rate=product.rate,
        gst_rate=product.gst_rate,
        quantity=quantity,
        discount_percent=discount_percent,
    )
    return calculate_line_item(item)


def _totals_fields(items: Iterable[InvoiceItem]) -> dict:
    totals = calculate_invoice_totals(items)
    totals.pop("net_total")
    return totals


def build_invoice(
    invoice_number: str,
    customer: Customer,
    items: List[InvoiceItem],
    payment_mode: PaymentMode = PaymentMode.CASH,
    invoice_date: Optional[date] = None,
    notes: Optional[str] = None,
    invoice_id: Optional[int] = None,
) -> Invoice:
    """Assemble a complete invoice.

    Lines are recomputed before aggregation so a line edited without
    recalculation cannot skew the totals. grand_total comes from the
    aggregate, never from re-summing line totals.
    """
    lines = [calculate_line_item(item) for item in items]
    invoice = Invoice(
        id=invoice_id,
        invoice_number=invoice_number,
        invoice_date=invoice_date or date.today(),
        customer_id=customer.id,
        customer_name=customer.name,
        customer_gst=customer.gstin or None,
        items=lines,
        payment_mode=payment_mode,
        notes=notes,
        **_totals_fields(lines),
    )
    logger.info(
        f"[INVOICE] Built {invoice.invoice_number}: {len(lines)} lines, grand total {invoice.grand_total}"
    )
    return invoice


def recalculate_invoice(
    invoice: Invoice,
    items: Optional[List[InvoiceItem]] = None,
    customer: Optional[Customer] = None,
    **changes,
) -> Invoice:
    """Edit an existing invoice: new totals pass, same id and invoice number."""
    lines = [calculate_line_item(item) for item in (items if items is not None else invoice.items)]
    update = dict(changes, items=lines, **_totals_fields(lines))
    update.pop("invoice_number", None)
    update.pop("id", None)
    if customer is not None:
        update.update(
            customer_id=customer.id,
            customer_name=customer.name,
            customer_gst=customer.gstin or None,
        )
    return invoice.model_copy(update=update)
