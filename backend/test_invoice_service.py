"""Invoice assembly: product snapshots, totals and edits."""
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pharmabill.schemas.catalog import Customer, Product
from pharmabill.schemas.invoice import PaymentMode
from pharmabill.services.invoice_service import (
    build_invoice,
    recalculate_invoice,
    snapshot_item,
    update_line_item,
)

PARACETAMOL = Product(
    id="p1",
    name="Paracetamol 500mg",
    brand="Calpol",
    batch_number="B2301",
    expiry_date=date(2027, 3, 31),
    pack_size="10x10",
    hsn_code="3004",
    rate=Decimal("25.50"),
    gst_rate=Decimal("12"),
    stock=120,
    min_stock=20,
)
COUGH_SYRUP = Product(
    id="p2",
    name="Benadryl Cough Syrup",
    category="Syrup",
    batch_number="S990",
    hsn_code="3004",
    rate=Decimal("95.00"),
    gst_rate=Decimal("5"),
)
WALK_IN = Customer(name="Cash Customer", gstin="")
CLINIC = Customer(id="c7", name="Shree Clinic", mobile="9822012345", gstin="27AAACS1234K1Z2")


def test_snapshot_copies_product_fields_and_computes_line():
    item = snapshot_item(PARACETAMOL, quantity=2)
    assert item.product_id == "p1"
    assert item.name == "Paracetamol 500mg"
    assert item.batch_number == "B2301"
    assert item.expiry_date == date(2027, 3, 31)
    assert item.hsn_code == "3004"
    assert item.discount_percent == 0
    assert item.tax_amount == Decimal("6.12")
    assert item.total_amount == Decimal("57.12")


def test_snapshot_is_not_affected_by_later_catalog_edits():
    item = snapshot_item(PARACETAMOL, quantity=1)
    repriced = PARACETAMOL.model_copy(update={"rate": Decimal("30.00"), "batch_number": "B2400"})
    assert repriced.rate == Decimal("30.00")
    assert item.rate == Decimal("25.50")
    assert item.batch_number == "B2301"


def test_build_invoice_example_totals():
    invoice = build_invoice("INV-001", WALK_IN, [snapshot_item(PARACETAMOL, 2)],
                            invoice_date=date(2026, 10, 19))
    assert invoice.invoice_number == "INV-001"
    assert invoice.customer_name == "Cash Customer"
    assert invoice.customer_gst is None, "empty GSTIN must not be stored as a blank string"
    assert invoice.sub_total == Decimal("51.00")
    assert invoice.total_tax == Decimal("6.12")
    assert invoice.net_total == Decimal("57.12")
    assert invoice.grand_total == Decimal("57")
    assert invoice.round_off == Decimal("-0.12")
    assert invoice.total_discount == 0
    assert invoice.payment_mode == PaymentMode.CASH


def test_build_invoice_keeps_entry_order_and_customer_snapshot():
    items = [snapshot_item(COUGH_SYRUP, 1), snapshot_item(PARACETAMOL, 3)]
    invoice = build_invoice("INV-014", CLINIC, items, payment_mode=PaymentMode.UPI, notes="Deliver by 5pm")
    assert [i.name for i in invoice.items] == ["Benadryl Cough Syrup", "Paracetamol 500mg"]
    assert invoice.customer_id == "c7"
    assert invoice.customer_gst == "27AAACS1234K1Z2"
    assert invoice.total_quantity == Decimal("4")
    assert invoice.invoice_date == date.today()
    assert invoice.notes == "Deliver by 5pm"


def test_grand_total_is_aggregate_not_sum_of_line_totals():
    # A line total edited post-hoc must not leak into the invoice totals.
    stale = snapshot_item(PARACETAMOL, 2).model_copy(update={"total_amount": Decimal("999")})
    invoice = build_invoice("INV-002", WALK_IN, [stale])
    assert invoice.items[0].total_amount == Decimal("57.12"), "lines are recomputed on assembly"
    assert invoice.grand_total == Decimal("57")

    line_sum = sum(i.total_amount for i in invoice.items)
    assert line_sum - invoice.grand_total == -invoice.round_off


def test_update_line_item_recomputes_only_on_financial_change():
    item = snapshot_item(PARACETAMOL, 2)
    renamed = update_line_item(item, name="Paracetamol 650mg")
    assert renamed.tax_amount == item.tax_amount
    assert renamed.name == "Paracetamol 650mg"

    more = update_line_item(item, quantity=4)
    assert more.tax_amount == Decimal("12.24")
    assert more.total_amount == Decimal("114.24")
    assert item.quantity == 2, "original line is left untouched"

    retaxed = update_line_item(item, gst_rate=18)
    assert retaxed.tax_amount == Decimal("9.18")


def test_recalculate_preserves_identity_and_number():
    original = build_invoice("INV-021", CLINIC, [snapshot_item(PARACETAMOL, 2)], invoice_id=5)
    edited = recalculate_invoice(
        original,
        items=[snapshot_item(PARACETAMOL, 2), snapshot_item(COUGH_SYRUP, 1)],
        invoice_number="INV-999",
        payment_mode=PaymentMode.CREDIT,
    )
    assert edited.id == 5
    assert edited.invoice_number == "INV-021", "the number assigned at creation never changes"
    assert edited.payment_mode == PaymentMode.CREDIT
    assert edited.sub_total == Decimal("146.00")
    assert edited.total_tax == Decimal("10.87")
    assert edited.grand_total == Decimal("157")
    assert original.grand_total == Decimal("57")


def test_recalculate_with_new_customer_refreshes_snapshot():
    original = build_invoice("INV-030", WALK_IN, [snapshot_item(COUGH_SYRUP, 1)])
    edited = recalculate_invoice(original, customer=CLINIC)
    assert edited.customer_name == "Shree Clinic"
    assert edited.customer_gst == "27AAACS1234K1Z2"
    assert edited.grand_total == original.grand_total


def test_invoice_is_immutable():
    invoice = build_invoice("INV-001", WALK_IN, [snapshot_item(PARACETAMOL, 1)])
    with pytest.raises(ValidationError):
        invoice.grand_total = Decimal("1")
