"""Device support lookups."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.db.enums import PhoneBrand
from app.schemas.phone import PhoneRead
from app.schemas.validation import (
    DeviceValidationRead,
    DeviceValidationRequest,
    SupportedModelRead,
)
from app.services import device_validation_service

router = APIRouter(prefix="/devices", tags=["devices"])


@router.post("/validate", response_model=DeviceValidationRead)
def validate_device(data: DeviceValidationRequest):
    """Check whether a brand/model pair is supported."""
    return device_validation_service.validate_device(data.brand, data.model)


@router.get("/supported-models", response_model=list[SupportedModelRead])
def list_supported_models(brand: PhoneBrand | None = Query(None)):
    return device_validation_service.get_supported_models(brand)


@router.get("/unsupported", response_model=list[PhoneRead])
def list_unsupported_devices(location_id: str = Query(...), db: Session = Depends(get_db)):
    return device_validation_service.get_unsupported_devices(db, location_id)
