"""Provisioning payload endpoint."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.schemas.provisioning import ProvisioningResponse
from app.services import provisioning_service
from app.services.provisioning_service import ProvisioningNotFoundError

router = APIRouter(prefix="/provisioning", tags=["provisioning"])


@router.get("/{location_id}", response_model=ProvisioningResponse)
def get_payload(location_id: str, db: Session = Depends(get_db)):
    """Generate and validate the provisioning payload for a location."""
    try:
        result = provisioning_service.generate_and_validate(db, location_id)
    except ProvisioningNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ProvisioningResponse(
        payload=result["payload"].to_wire(),
        valid=result["valid"],
        errors=result["errors"],
    )
