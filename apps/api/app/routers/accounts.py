"""Account dashboards: warnings and progress."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.db.models import Account
from app.schemas.session import ProgressRead
from app.schemas.warnings import AccountWarningsRead, LocationWarningsRead
from app.services import account_warnings_service, onboarding_store, progress_service

router = APIRouter(tags=["dashboards"])


def _require_account(db: Session, account_id: str) -> None:
    if db.get(Account, account_id) is None:
        raise HTTPException(status_code=404, detail="Account not found")


@router.get("/accounts/{account_id}/warnings", response_model=AccountWarningsRead)
def get_account_warnings(account_id: str, db: Session = Depends(get_db)):
    """Blockers and warnings rolled up across an account's locations."""
    _require_account(db, account_id)
    return account_warnings_service.calculate_account_warnings(db, account_id)


@router.get("/accounts/{account_id}/progress", response_model=ProgressRead)
def get_account_progress(account_id: str, db: Session = Depends(get_db)):
    _require_account(db, account_id)
    return progress_service.calculate_account_progress(db, account_id)


@router.get("/locations/{location_id}/warnings", response_model=LocationWarningsRead)
def get_location_warnings(location_id: str, db: Session = Depends(get_db)):
    if onboarding_store.get_location(db, location_id) is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return account_warnings_service.calculate_location_warnings(db, location_id)
