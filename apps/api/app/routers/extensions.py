"""Extension series endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import Actor, get_actor, get_db
from app.schemas.extension import (
    ExtensionAllocate,
    ExtensionAvailability,
    ExtensionList,
    ExtensionReserve,
    ExtensionSeriesCreate,
    ExtensionSeriesRead,
)
from app.services import extension_service, onboarding_store
from app.services.extension_service import (
    ExtensionSeriesNotFoundError,
    InsufficientExtensionsError,
    InvalidExtensionRangeError,
)

router = APIRouter(prefix="/extensions", tags=["extensions"])


@router.get("", response_model=ExtensionSeriesRead)
def get_series(location_id: str = Query(...), db: Session = Depends(get_db)):
    """Get the location's series, initializing the default range if needed."""
    if onboarding_store.get_location(db, location_id) is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return extension_service.initialize_extension_series(db, location_id)


@router.post("", response_model=ExtensionSeriesRead)
def create_series(data: ExtensionSeriesCreate, db: Session = Depends(get_db)):
    """Create or replace a series; reserved extensions are merged."""
    if onboarding_store.get_location(db, data.location_id) is None:
        raise HTTPException(status_code=404, detail="Location not found")
    try:
        return extension_service.create_extension_series(db, data.model_dump())
    except InvalidExtensionRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/available", response_model=ExtensionList)
def list_available(
    location_id: str = Query(...),
    count: int = Query(1, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Preview free extensions without reserving them."""
    try:
        extensions = extension_service.generate_available_extensions(db, location_id, count)
    except ExtensionSeriesNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientExtensionsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ExtensionList(extensions=extensions)


@router.get("/check", response_model=ExtensionAvailability)
def check_extension(
    location_id: str = Query(...),
    extension: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    return ExtensionAvailability(
        extension=extension,
        available=extension_service.is_extension_available(db, location_id, extension),
    )


@router.post("/reserve", response_model=ExtensionSeriesRead)
def reserve_extension(data: ExtensionReserve, db: Session = Depends(get_db)):
    try:
        return extension_service.reserve_extension(db, data.location_id, data.extension)
    except ExtensionSeriesNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/allocate", response_model=ExtensionList)
def allocate(
    data: ExtensionAllocate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Generate and reserve extensions in one step."""
    try:
        extensions = extension_service.allocate_extensions(
            db, data.location_id, data.count, user_id=actor.user_id
        )
    except ExtensionSeriesNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientExtensionsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ExtensionList(extensions=extensions)
