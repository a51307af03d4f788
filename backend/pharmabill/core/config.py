"""Application configuration.

Environment variables override all defaults. A local .env next to the
backend directory is loaded first (never overriding real environment).
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


# Issuer record used when the settings table is empty or unreachable.
DEFAULT_APP_SETTINGS = {
    "pharmacy_name": "MediCare Plus Pharmacy",
    "address": "Shop 12, Wellness Plaza, Andheri East, Mumbai 400069",
    "gstin": "27ABCDE1234F1Z5",
    "dl_number": "MH-MZ1-123456",
    "phone": "9876543210",
    "email": "billing@medicareplus.com",
    "bank_name": "HDFC Bank",
    "account_number": "50100123456789",
    "ifsc": "HDFC0001234",
    "terms": "Goods once sold will not be taken back. Keep in cool dry place.",
    "state": "Maharashtra",
    "signature_image": "",
}


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmabill.db")

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:3001,http://127.0.0.1:3001",
        ).split(",")
        if origin.strip()
    ]

    # Invoice numbering
    INVOICE_PREFIX: str = os.getenv("INVOICE_PREFIX", "INV")
    INVOICE_SEED: str = os.getenv("INVOICE_SEED", "INV-001")
    INVOICE_SEQUENCE: str = os.getenv("INVOICE_SEQUENCE", "lexicographic")  # lexicographic | numeric

    # Where print-mode PDFs land when saved from the command line
    PDF_OUTPUT_DIR: str = os.getenv("PDF_OUTPUT_DIR", "./invoices")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"


settings = Settings()
