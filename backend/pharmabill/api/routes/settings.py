"""Pharmacy settings: issuer details, bank details, terms and signature."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmabill.api.deps import get_db
from pharmabill.schemas.settings import AppSettings
from pharmabill.services import storage_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=AppSettings)
def get_settings(db: Session = Depends(get_db)):
    return storage_service.load_settings(db)


@router.put("", response_model=AppSettings)
def update_settings(data: AppSettings, db: Session = Depends(get_db)):
    logger.info(f"[SETTINGS] Update request for {data.pharmacy_name}")
    return storage_service.save_settings(db, data)
