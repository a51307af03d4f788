"""Invoice and settings persistence. Used by the HTTP routes around the billing core."""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pharmabill.core.exceptions import DuplicateInvoiceNumberError, InvoiceNotFoundError
from pharmabill.models.app_settings import SettingsRecord
from pharmabill.models.invoice import InvoiceRecord
from pharmabill.schemas.invoice import Invoice
from pharmabill.schemas.settings import AppSettings

logger = logging.getLogger(__name__)

# Stored as exact decimal text, never rounded to a column scale.
EXACT_AMOUNT_FIELDS = ("sub_total", "total_discount", "total_tax", "round_off")


def list_invoices(db: Session) -> List[Invoice]:
    records = db.query(InvoiceRecord).order_by(InvoiceRecord.id).all()
    return [Invoice.model_validate(r) for r in records]


def get_invoice(db: Session, invoice_id: int) -> Invoice:
    record = db.get(InvoiceRecord, invoice_id)
    if not record:
        raise InvoiceNotFoundError(invoice_id)
    return Invoice.model_validate(record)


def save_invoice(db: Session, invoice: Invoice) -> Invoice:
    """Insert a new invoice, or update the stored one with the same id.

    Raises:
        DuplicateInvoiceNumberError: another invoice already holds the number
        InvoiceNotFoundError: invoice.id is set but nothing is stored under it
    """
    clash = db.query(InvoiceRecord).filter(InvoiceRecord.invoice_number == invoice.invoice_number)
    if invoice.id is not None:
        clash = clash.filter(InvoiceRecord.id != invoice.id)
    if clash.first():
        raise DuplicateInvoiceNumberError(invoice.invoice_number)

    if invoice.id is not None:
        record = db.get(InvoiceRecord, invoice.id)
        if not record:
            raise InvoiceNotFoundError(invoice.id)
    else:
        record = InvoiceRecord()
        db.add(record)

    fields = invoice.model_dump(exclude={"id", "items", "payment_mode", *EXACT_AMOUNT_FIELDS})
    for name, value in fields.items():
        setattr(record, name, value)
    for name in EXACT_AMOUNT_FIELDS:
        setattr(record, name, str(getattr(invoice, name)))
    record.payment_mode = invoice.payment_mode.value
    record.items = [item.model_dump(mode="json") for item in invoice.items]

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateInvoiceNumberError(invoice.invoice_number)
    db.refresh(record)

    logger.info(f"[STORAGE] Saved invoice {record.invoice_number} (id={record.id})")
    return Invoice.model_validate(record)


def delete_invoice(db: Session, invoice_id: int) -> None:
    record = db.get(InvoiceRecord, invoice_id)
    if not record:
        raise InvoiceNotFoundError(invoice_id)
    db.delete(record)
    db.commit()
    logger.info(f"[STORAGE] Deleted invoice {record.invoice_number} (id={invoice_id})")


def load_settings(db: Session) -> AppSettings:
    """Stored issuer settings, or the documented defaults when none are available."""
    try:
        record = db.query(SettingsRecord).first()
    except SQLAlchemyError as e:
        logger.error(f"[STORAGE] Settings unavailable, using defaults: {e}")
        return AppSettings.defaults()

    if not record:
        return AppSettings.defaults()

    values = {
        name: getattr(record, name)
        for name in AppSettings.model_fields
    }
    for name, value in values.items():
        if value is None and name != "signature_image":
            values[name] = ""
    return AppSettings(**values)


def save_settings(db: Session, app_settings: AppSettings) -> AppSettings:
    record = db.query(SettingsRecord).first()
    if not record:
        record = SettingsRecord()
        db.add(record)
    for name, value in app_settings.model_dump().items():
        setattr(record, name, value)
    db.commit()
    logger.info(f"[STORAGE] Settings updated for {app_settings.pharmacy_name}")
    return load_settings(db)
