from sqlalchemy import Column, Integer, String, Numeric, Date, Text
from sqlalchemy.types import JSON
from pharmabill.db.base import Base


class InvoiceRecord(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(64), unique=True, nullable=False, index=True)
    invoice_date = Column(Date, nullable=False)
    customer_id = Column(String(64), nullable=True)
    customer_name = Column(String(255), nullable=False)  # snapshot at sale time
    customer_gst = Column(String(32), nullable=True)
    items = Column(JSON, nullable=False, default=list)  # line snapshots, in entry order
    # Unrounded aggregates kept as exact decimal text, same as the line snapshots
    sub_total = Column(String(40), nullable=False, default="0")
    total_discount = Column(String(40), nullable=False, default="0")
    total_tax = Column(String(40), nullable=False, default="0")
    round_off = Column(String(40), nullable=False, default="0")
    grand_total = Column(Numeric(14, 2), nullable=False, default=0)  # whole currency units
    payment_mode = Column(String(16), nullable=False, default="Cash")  # Cash | UPI | Card | Credit
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<InvoiceRecord {self.invoice_number} grand_total={self.grand_total}>"
