"""CSV export of invoices."""
import csv
import io
from datetime import date
from decimal import Decimal

from pharmabill.schemas.catalog import Customer, Product
from pharmabill.schemas.invoice import PaymentMode
from pharmabill.services.export_service import CSV_COLUMNS, export_invoices_csv
from pharmabill.services.invoice_service import build_invoice, snapshot_item

EXPECTED_HEADER = (
    "Invoice No,Date,Customer Name,Customer GST,Payment Mode,Item Name,Batch,HSN,"
    "Expiry,Quantity,Rate,GST Rate,Tax Amount,Total Amount"
)


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def _sample_invoices():
    paracetamol = Product(name="Paracetamol 500mg", batch_number="B2301", hsn_code="3004",
                          expiry_date=date(2027, 3, 31), rate=Decimal("25.50"), gst_rate=Decimal("12"))
    bandage = Product(name="Bandage, Crepe 10cm", batch_number="CR12", hsn_code="3005",
                      rate=Decimal("80"), gst_rate=Decimal("5"))
    first = build_invoice("INV-001", Customer(name="Sharma, Ravi"), [snapshot_item(paracetamol, 2)],
                          payment_mode=PaymentMode.UPI, invoice_date=date(2026, 10, 1))
    second = build_invoice("INV-002", Customer(name="Shree Clinic", gstin="27AAACS1234K1Z2"),
                           [snapshot_item(paracetamol, 1), snapshot_item(bandage, 3)],
                           payment_mode=PaymentMode.CREDIT, invoice_date=date(2026, 10, 2))
    return [first, second]


def test_header_matches_column_order():
    text = export_invoices_csv([])
    assert text.splitlines()[0] == EXPECTED_HEADER
    assert ",".join(CSV_COLUMNS) == EXPECTED_HEADER
    assert len(text.splitlines()) == 1


def test_one_row_per_line_item():
    rows = _rows(export_invoices_csv(_sample_invoices()))
    assert len(rows) == 1 + 3
    assert [r[0] for r in rows[1:]] == ["INV-001", "INV-002", "INV-002"]
    assert rows[1] == [
        "INV-001", "2026-10-01", "Sharma, Ravi", "", "UPI", "Paracetamol 500mg", "B2301", "3004",
        "2027-03-31", "2", "25.5", "12%", "6.12", "57.12",
    ]
    assert rows[3][11:] == ["5%", "12.00", "252.00"]
    assert rows[3][8] == "", "missing expiry exports as an empty field"


def test_fields_with_separators_are_quoted():
    text = export_invoices_csv(_sample_invoices())
    assert '"Sharma, Ravi"' in text
    assert '"Bandage, Crepe 10cm"' in text
    assert '"Shree Clinic"' not in text, "plain fields stay unquoted"
