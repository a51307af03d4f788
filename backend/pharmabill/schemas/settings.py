from pydantic import BaseModel
from typing import Optional

from pharmabill.core.config import DEFAULT_APP_SETTINGS


class AppSettings(BaseModel):
    """Issuer-side data printed on every invoice. Passed explicitly into the renderer."""
    pharmacy_name: str
    address: str
    gstin: str
    dl_number: str = ""  # drug licence
    phone: str = ""
    email: str = ""
    bank_name: str = ""
    account_number: str = ""
    ifsc: str = ""
    terms: str = ""
    state: str = ""
    signature_image: Optional[str] = None  # base64, optionally a data: URL

    class Config:
        frozen = True
        from_attributes = True

    @classmethod
    def defaults(cls) -> "AppSettings":
        return cls(**DEFAULT_APP_SETTINGS)
