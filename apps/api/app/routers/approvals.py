"""Approval request endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import Actor, get_actor, get_db, require_implementation_lead
from app.db.enums import ApprovalStatus
from app.schemas.approval import ApprovalCreate, ApprovalRead, ApprovalResolve
from app.services import approval_service, onboarding_store, submission_service
from app.services.approval_service import ApprovalNotFoundError, ApprovalStateError

router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.get("", response_model=list[ApprovalRead])
def list_approvals(
    location_id: str = Query(...),
    status: ApprovalStatus | None = Query(None),
    db: Session = Depends(get_db),
):
    """Approvals for a location, optionally only pending ones."""
    if status == ApprovalStatus.PENDING:
        return approval_service.get_pending_approvals(db, location_id)
    approvals = approval_service.get_approvals_for_location(db, location_id)
    if status:
        approvals = [a for a in approvals if a.status == status.value]
    return approvals


@router.post("", response_model=ApprovalRead, status_code=201)
def request_approval(
    data: ApprovalCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    if onboarding_store.get_location(db, data.location_id) is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return approval_service.request_approval(
        db,
        data.type,
        location_id=data.location_id,
        entity_id=data.entity_id,
        requested_by=actor.user_id,
        details=data.details,
    )


@router.get("/{approval_id}", response_model=ApprovalRead)
def get_approval(approval_id: str, db: Session = Depends(get_db)):
    approval = approval_service.get_approval(db, approval_id)
    if not approval:
        raise HTTPException(status_code=404, detail="Approval not found")
    return approval


@router.post("/{approval_id}/approve", response_model=ApprovalRead)
def approve(
    approval_id: str,
    data: ApprovalResolve | None = None,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Approve a pending request (implementation leads only)."""
    require_implementation_lead(actor)
    try:
        approval = approval_service.approve(
            db, approval_id, actor.user_id, comments=data.comments if data else None
        )
    except ApprovalNotFoundError:
        raise HTTPException(status_code=404, detail="Approval not found")
    except ApprovalStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    submission_service.on_approval_resolved(db, approval, actor.user_id)
    return approval


@router.post("/{approval_id}/reject", response_model=ApprovalRead)
def reject(
    approval_id: str,
    data: ApprovalResolve | None = None,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Reject a pending request; the location is blocked."""
    require_implementation_lead(actor)
    try:
        approval = approval_service.reject(
            db, approval_id, actor.user_id, comments=data.comments if data else None
        )
    except ApprovalNotFoundError:
        raise HTTPException(status_code=404, detail="Approval not found")
    except ApprovalStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    submission_service.on_approval_resolved(db, approval, actor.user_id)
    return approval
