"""Tax arithmetic for invoice lines and invoice totals.

Pure functions over Decimal. No validation: callers make sure quantity is
positive and rates are non-negative before calling.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

HUNDRED = Decimal("100")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_to_unit(value) -> Decimal:
    """Round to the nearest whole currency unit, ties away from zero."""
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def line_discount_amount(base_amount: Decimal, discount_percent) -> Decimal:
    # Discount entry is not wired to billing yet; the percent is carried on
    # the line for data compatibility only.
    return ZERO


def calculate_line_amounts(rate, quantity, gst_rate, discount_percent=0) -> dict:
    """Calculate one line's GST breakdown.

    Args:
        rate: Unit rate excluding tax
        quantity: Units sold
        gst_rate: GST percent (0, 5, 12, 18 or 28)
        discount_percent: Carried through, currently always yields zero discount

    Returns:
        dict with base_amount, discount_amount, taxable_value, tax_amount, total_amount
    """
    base = to_decimal(rate) * to_decimal(quantity)
    discount = line_discount_amount(base, to_decimal(discount_percent))
    taxable = base - discount
    tax = taxable * to_decimal(gst_rate) / HUNDRED

    return {
        "base_amount": base,
        "discount_amount": discount,
        "taxable_value": taxable,
        "tax_amount": tax,
        "total_amount": taxable + tax,
    }


def calculate_invoice_totals(items: Iterable) -> dict:
    """Aggregate computed lines into invoice totals.

    Each item needs rate, quantity, discount_percent and tax_amount attributes.
    sub_total is summed from raw rate x quantity, not from the discounted base.
    """
    sub_total = ZERO
    total_discount = ZERO
    total_tax = ZERO
    for item in items:
        base = to_decimal(item.rate) * to_decimal(item.quantity)
        sub_total += base
        total_discount += line_discount_amount(base, item.discount_percent)
        total_tax += to_decimal(item.tax_amount)

    net_total = sub_total + total_tax
    grand_total = round_to_unit(net_total)

    return {
        "sub_total": sub_total,
        "total_discount": total_discount,
        "total_tax": total_tax,
        "net_total": net_total,
        "grand_total": grand_total,
        "round_off": grand_total - net_total,
    }
