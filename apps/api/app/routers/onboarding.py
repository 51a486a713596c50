"""Onboarding endpoints: answers, wizard session, skip rules, submission, copy."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.deps import Actor, get_actor, get_db, require_implementation_lead
from app.core.rate_limit import limiter, submit_limit
from app.schemas.onboarding import (
    CopyLocationRequest,
    OnboardingRead,
    OnboardingUpdate,
    OnboardingUpdateResponse,
    SourceLocationItem,
)
from app.schemas.phone import PhoneCreate, PhoneRead, PhoneUpdate, PhoneWriteResponse
from app.schemas.session import (
    CanSubmitRead,
    ProgressRead,
    SessionRead,
    SkipRuleRead,
    StatusUpdate,
    StepUpdate,
    SubmitResponse,
)
from app.services import (
    copy_location_service,
    lock_service,
    onboarding_service,
    onboarding_session_service,
    onboarding_store,
    phone_service,
    progress_service,
    skip_rule_service,
    submission_service,
)
from app.services.copy_location_service import CopyLocationError
from app.services.errors import NotFoundError
from app.services.lock_service import OnboardingLockedError, OverrideNotPermittedError
from app.services.onboarding_session_service import SessionLockedError
from app.services.phone_service import (
    AssignedUserNotFoundError,
    DuplicateExtensionError,
    PhoneNotFoundError,
)
from app.services.submission_service import SubmissionBlockedError

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


class UnlockRequest(BaseModel):
    reason: str


def _require_location(db: Session, location_id: str) -> None:
    if onboarding_store.get_location(db, location_id) is None:
        raise HTTPException(status_code=404, detail="Location not found")


# ============================================================================
# Onboarding data
# ============================================================================

@router.get("/{location_id}", response_model=OnboardingRead)
def get_onboarding(location_id: str, db: Session = Depends(get_db)):
    """Get a location's onboarding answers."""
    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        raise HTTPException(status_code=404, detail="Onboarding data not found")
    return onboarding


@router.patch("/{location_id}", response_model=OnboardingUpdateResponse)
def update_onboarding(
    location_id: str,
    data: OnboardingUpdate,
    override: bool = Query(False, description="Acknowledge editing a locked onboarding"),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Merge a partial update into a location's onboarding."""
    try:
        result = onboarding_service.update_onboarding(
            db,
            location_id,
            data.model_dump(exclude_unset=True, mode="json"),
            role=actor.role,
            user_id=actor.user_id,
            override=override,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OnboardingLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return OnboardingUpdateResponse(
        onboarding=OnboardingRead.model_validate(result["onboarding"]),
        requires_override=result["requires_override"],
    )


@router.post("/{location_id}/unlock", status_code=204)
def unlock_onboarding(
    location_id: str,
    data: UnlockRequest,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Reopen a locked onboarding (implementation leads only)."""
    try:
        lock_service.unlock_onboarding(db, location_id, actor.user_id, actor.role, data.reason)
    except OverrideNotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============================================================================
# Wizard session
# ============================================================================

@router.get("/{location_id}/session", response_model=SessionRead)
def get_session(location_id: str, db: Session = Depends(get_db)):
    """Get (or rebuild) the wizard session for a location."""
    _require_location(db, location_id)
    return onboarding_session_service.get_or_create_session(db, location_id)


@router.post("/{location_id}/steps", response_model=SessionRead)
def update_step(location_id: str, data: StepUpdate, db: Session = Depends(get_db)):
    """Navigate to a step, or complete it when ``complete`` is set."""
    _require_location(db, location_id)
    try:
        if data.complete:
            return onboarding_session_service.complete_step(db, location_id, data.step)
        return onboarding_session_service.update_step(db, location_id, data.step)
    except SessionLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.patch("/{location_id}/session/status", response_model=SessionRead)
def update_status(
    location_id: str,
    data: StatusUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Set the onboarding status (implementation leads only)."""
    require_implementation_lead(actor)
    try:
        submission_service.transition_status(
            db, location_id, data.status, actor.user_id, lock_session=data.lock_session
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return onboarding_session_service.get_or_create_session(db, location_id)


@router.delete("/{location_id}/session", status_code=204)
def reset_session(location_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Drop the cached session so it is rebuilt from onboarding data."""
    require_implementation_lead(actor)
    onboarding_session_service.reset_session(db, location_id)


@router.get("/{location_id}/progress", response_model=ProgressRead)
def get_progress(location_id: str, db: Session = Depends(get_db)):
    _require_location(db, location_id)
    return progress_service.calculate_location_progress(db, location_id)


@router.get("/{location_id}/skip-rules", response_model=list[SkipRuleRead])
def get_skip_rules(location_id: str, db: Session = Depends(get_db)):
    """Questions the wizard can hide for this location."""
    return skip_rule_service.get_skip_rules(db, location_id)


# ============================================================================
# Submission
# ============================================================================

@router.get("/{location_id}/submit", response_model=CanSubmitRead)
def check_submit(location_id: str, db: Session = Depends(get_db)):
    """Dry run of the submission gate."""
    _require_location(db, location_id)
    return onboarding_session_service.can_submit(db, location_id)


@router.post("/{location_id}/submit", response_model=SubmitResponse)
@limiter.limit(submit_limit)
def submit_onboarding(
    request: Request,
    location_id: str,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Submit a location's onboarding for approval."""
    _require_location(db, location_id)
    try:
        result = submission_service.submit_onboarding(db, location_id, actor.user_id)
    except SubmissionBlockedError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": "Cannot submit onboarding", "reasons": e.reasons},
        )
    return SubmitResponse(
        success=True,
        status=result["status"],
        payload_valid=result["payload_valid"],
        payload_errors=result["payload_errors"],
    )


# ============================================================================
# Copy from another location
# ============================================================================

@router.get("/{location_id}/copy", response_model=list[SourceLocationItem])
def list_copy_sources(location_id: str, db: Session = Depends(get_db)):
    """Other locations of the same account that can be copied from."""
    _require_location(db, location_id)
    return copy_location_service.get_available_source_locations(db, location_id)


@router.post("/{location_id}/copy", response_model=OnboardingRead)
def copy_from_location(
    location_id: str,
    data: CopyLocationRequest,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Copy contact fields from another location of the same account."""
    try:
        lock_service.ensure_editable(db, location_id, actor.role, user_id=actor.user_id)
        return copy_location_service.copy_from_previous_location(
            db,
            from_location_id=data.from_location_id,
            to_location_id=location_id,
            fields_to_copy=data.fields_to_copy,
            user_id=actor.user_id,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OnboardingLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CopyLocationError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================================================
# Phones
# ============================================================================

@router.get("/{location_id}/phones", response_model=list[PhoneRead])
def list_phones(location_id: str, db: Session = Depends(get_db)):
    _require_location(db, location_id)
    return phone_service.list_phones(db, location_id)


@router.post("/{location_id}/phones", response_model=PhoneWriteResponse, status_code=201)
def create_phone(
    location_id: str,
    data: PhoneCreate,
    override: bool = Query(False),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Add a device; unsupported devices open a purchase approval."""
    try:
        lock_service.ensure_editable(db, location_id, actor.role, override, actor.user_id)
        result = phone_service.create_phone(
            db, location_id, data.model_dump(mode="json"), requested_by=actor.user_id
        )
    except AssignedUserNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (OnboardingLockedError, DuplicateExtensionError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return PhoneWriteResponse(
        phone=PhoneRead.model_validate(result["phone"]),
        requires_approval=result["requires_approval"],
        approval_id=result["approval_id"],
    )


@router.patch("/{location_id}/phones/{phone_id}", response_model=PhoneWriteResponse)
def update_phone(
    location_id: str,
    phone_id: str,
    data: PhoneUpdate,
    override: bool = Query(False),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    try:
        lock_service.ensure_editable(db, location_id, actor.role, override, actor.user_id)
        result = phone_service.update_phone(
            db,
            location_id,
            phone_id,
            data.model_dump(exclude_unset=True, mode="json"),
            requested_by=actor.user_id,
        )
    except PhoneNotFoundError:
        raise HTTPException(status_code=404, detail="Phone not found")
    except AssignedUserNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (OnboardingLockedError, DuplicateExtensionError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return PhoneWriteResponse(
        phone=PhoneRead.model_validate(result["phone"]),
        requires_approval=result["requires_approval"],
        approval_id=result["approval_id"],
    )


@router.delete("/{location_id}/phones/{phone_id}", status_code=204)
def delete_phone(
    location_id: str,
    phone_id: str,
    override: bool = Query(False),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    try:
        lock_service.ensure_editable(db, location_id, actor.role, override, actor.user_id)
        phone_service.delete_phone(db, location_id, phone_id)
    except PhoneNotFoundError:
        raise HTTPException(status_code=404, detail="Phone not found")
    except OnboardingLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))
