"""Catalog and customer snapshots handed to the billing core.

Both are owned by external storage; the core only reads them.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import date
from decimal import Decimal


GST_RATES = (0, 5, 12, 18, 28)
CATEGORIES = ("Tablet", "Syrup", "Injection", "Surgical", "Equipment", "Consumable")


class Product(BaseModel):
    id: Optional[str] = None
    name: str
    category: str = "Tablet"
    brand: str = ""
    batch_number: str = ""
    expiry_date: Optional[date] = None
    pack_size: str = ""
    hsn_code: str = ""
    rate: Decimal = Decimal("0")  # selling price excluding tax
    gst_rate: Decimal = Decimal("12")  # percent, one of GST_RATES by convention
    stock: int = 0
    min_stock: int = 0

    class Config:
        frozen = True
        from_attributes = True


class Customer(BaseModel):
    id: Optional[str] = None
    name: str
    mobile: str = ""  # empty for walk-in cash sales
    email: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None  # absent for B2C
    state: str = "Maharashtra"

    class Config:
        frozen = True
        from_attributes = True
