#!/usr/bin/env python
"""Print stored invoices to PDF files.

Usage: python print_invoice.py INV-004 [INV-005 ...]
Files land in PDF_OUTPUT_DIR as <invoice number>.pdf.
"""
import logging
import sys

from pharmabill.core.config import settings
from pharmabill.db.init_db import init_db
from pharmabill.db.session import SessionLocal
from pharmabill.services import storage_service
from pharmabill.services.pdf_service import RenderMode, generate_invoice_pdf


def main(invoice_numbers):
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db()
    db = SessionLocal()
    try:
        app_settings = storage_service.load_settings(db)
        invoices = {inv.invoice_number: inv for inv in storage_service.list_invoices(db)}
        missing = 0
        for number in invoice_numbers:
            invoice = invoices.get(number)
            if not invoice:
                print(f"❌ Invoice {number} not found")
                missing += 1
                continue
            rendered = generate_invoice_pdf(invoice, app_settings, RenderMode.PRINT)
            path = rendered.save(settings.PDF_OUTPUT_DIR)
            print(f"✅ {number} -> {path} ({rendered.page_count} page(s))")
        return 1 if missing else 0
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1:]))
