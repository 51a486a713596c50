"""Onboarding validation endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.schemas.validation import ValidationResultRead
from app.services import validation_service

router = APIRouter(prefix="/validation", tags=["validation"])


@router.get("/{location_id}", response_model=ValidationResultRead)
def validate_onboarding(location_id: str, db: Session = Depends(get_db)):
    """Full submission validation."""
    return validation_service.validate_onboarding_for_submission(db, location_id)


@router.get("/{location_id}/call-flow", response_model=ValidationResultRead)
def validate_call_flow(location_id: str, db: Session = Depends(get_db)):
    return validation_service.validate_call_flow_for_location(db, location_id)


@router.get("/{location_id}/working-hours", response_model=ValidationResultRead)
def validate_working_hours(location_id: str, db: Session = Depends(get_db)):
    return validation_service.validate_working_hours(db, location_id)
