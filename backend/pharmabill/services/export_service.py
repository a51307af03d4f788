"""Flat CSV export of invoices, one row per line item."""
import csv
import io
import logging
from typing import Iterable

from pharmabill.schemas.invoice import Invoice
from pharmabill.services.pdf_layout import format_quantity

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "Invoice No", "Date", "Customer Name", "Customer GST", "Payment Mode",
    "Item Name", "Batch", "HSN", "Expiry", "Quantity", "Rate", "GST Rate",
    "Tax Amount", "Total Amount",
]


def export_invoices_csv(invoices: Iterable[Invoice]) -> str:
    """Export all invoices as CSV text. Invoices without items produce no rows."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)

    rows = 0
    for inv in invoices:
        for item in inv.items:
            writer.writerow([
                inv.invoice_number,
                inv.invoice_date.isoformat(),
                inv.customer_name,
                inv.customer_gst or "",
                inv.payment_mode.value,
                item.name,
                item.batch_number,
                item.hsn_code,
                item.expiry_date.isoformat() if item.expiry_date else "",
                format_quantity(item.quantity),
                format_quantity(item.rate),
                f"{format_quantity(item.gst_rate)}%",
                f"{item.tax_amount:.2f}",
                f"{item.total_amount:.2f}",
            ])
            rows += 1

    logger.info(f"[EXPORT] Wrote {rows} invoice line(s)")
    return output.getvalue()
