"""Create all tables. Run on app startup."""
import logging

from pharmabill.db.base import Base
from pharmabill.db.session import engine
from pharmabill.models import invoice, app_settings  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind=None):
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info(f"[STORAGE] Tables ready on {bind.url}")
