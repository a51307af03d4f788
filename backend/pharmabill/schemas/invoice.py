from enum import Enum
from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal

from pharmabill.schemas.catalog import Customer, Product


class PaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"
    CREDIT = "Credit"


class InvoiceItem(BaseModel):
    """One billed line: product snapshot taken at sale time plus computed amounts."""
    product_id: Optional[str] = None
    name: str
    category: str = "Tablet"
    brand: str = ""
    batch_number: str = ""
    expiry_date: Optional[date] = None
    pack_size: str = ""
    hsn_code: str = ""
    rate: Decimal
    gst_rate: Decimal
    quantity: Decimal
    discount_percent: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")  # informational; grand_total is authoritative

    class Config:
        frozen = True
        from_attributes = True


class Invoice(BaseModel):
    id: Optional[int] = None
    invoice_number: str
    invoice_date: date
    customer_id: Optional[str] = None
    customer_name: str
    customer_gst: Optional[str] = None
    items: List[InvoiceItem] = []
    sub_total: Decimal = Decimal("0")
    total_discount: Decimal = Decimal("0")
    total_tax: Decimal = Decimal("0")
    round_off: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")
    payment_mode: PaymentMode = PaymentMode.CASH
    notes: Optional[str] = None

    class Config:
        frozen = True
        from_attributes = True

    @property
    def net_total(self) -> Decimal:
        return self.sub_total + self.total_tax

    @property
    def total_quantity(self) -> Decimal:
        return sum((item.quantity for item in self.items), Decimal("0"))


# ---- request bodies -------------------------------------------------------

class InvoiceLineIn(BaseModel):
    product: Product
    quantity: Decimal = Decimal("1")
    discount_percent: Decimal = Decimal("0")


class InvoiceUpdate(BaseModel):
    customer: Customer
    items: List[InvoiceLineIn]
    payment_mode: PaymentMode = PaymentMode.CASH
    invoice_date: Optional[date] = None
    notes: Optional[str] = None


class InvoiceCreate(InvoiceUpdate):
    invoice_number: Optional[str] = None  # proposed by the sequencer when omitted
