from sqlalchemy import Column, Integer, String, Text
from pharmabill.db.base import Base


class SettingsRecord(Base):
    """Single row of issuer details printed on invoices."""
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, index=True)
    pharmacy_name = Column(String(255), nullable=False)
    address = Column(String(512), nullable=False)
    gstin = Column(String(32), nullable=False)
    dl_number = Column(String(64), default="")
    phone = Column(String(64), default="")
    email = Column(String(255), default="")
    bank_name = Column(String(255), default="")
    account_number = Column(String(64), default="")
    ifsc = Column(String(32), default="")
    terms = Column(Text, default="")
    state = Column(String(64), default="")
    signature_image = Column(Text, nullable=True)  # base64
