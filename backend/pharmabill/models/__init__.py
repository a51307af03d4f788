from pharmabill.models.invoice import InvoiceRecord
from pharmabill.models.app_settings import SettingsRecord

__all__ = ["InvoiceRecord", "SettingsRecord"]
