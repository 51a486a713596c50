"""Approval requests (phone purchases, credit, provisioning)."""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from app.core.structured_logging import build_log_context
from app.db.base import utcnow
from app.db.enums import ApprovalStatus, ApprovalType
from app.db.models import ApprovalRequest
from app.services.errors import NotFoundError, StateConflictError

logger = logging.getLogger(__name__)


class ApprovalNotFoundError(NotFoundError):
    pass


class ApprovalStateError(StateConflictError):
    pass


def get_approval(db: Session, approval_id: str) -> ApprovalRequest | None:
    return db.query(ApprovalRequest).filter(ApprovalRequest.id == approval_id).first()


def get_pending_approvals(db: Session, location_id: str) -> list[ApprovalRequest]:
    """Pending approvals for one location, oldest first."""
    return (
        db.query(ApprovalRequest)
        .filter(
            ApprovalRequest.location_id == location_id,
            ApprovalRequest.status == ApprovalStatus.PENDING.value,
        )
        .order_by(ApprovalRequest.requested_at)
        .all()
    )


def count_pending_approvals(db: Session, location_id: str) -> int:
    return (
        db.query(ApprovalRequest)
        .filter(
            ApprovalRequest.location_id == location_id,
            ApprovalRequest.status == ApprovalStatus.PENDING.value,
        )
        .count()
    )


def has_pending_approvals(db: Session, location_id: str) -> bool:
    return count_pending_approvals(db, location_id) > 0


def get_approvals_for_location(db: Session, location_id: str) -> list[ApprovalRequest]:
    return (
        db.query(ApprovalRequest)
        .filter(ApprovalRequest.location_id == location_id)
        .order_by(ApprovalRequest.requested_at.desc())
        .all()
    )


def request_approval(
    db: Session,
    approval_type: ApprovalType,
    location_id: str,
    entity_id: str,
    requested_by: str,
    details: dict[str, Any] | None = None,
    commit: bool = True,
) -> ApprovalRequest:
    """Open a PENDING approval request."""
    approval = ApprovalRequest(
        type=ApprovalType(approval_type).value,
        location_id=location_id,
        entity_id=entity_id,
        status=ApprovalStatus.PENDING.value,
        details=details or {},
        requested_by=requested_by,
        requested_at=utcnow(),
    )
    db.add(approval)
    if commit:
        db.commit()
        db.refresh(approval)
    else:
        db.flush()

    logger.info(
        f"Approval requested: {approval.type} for {entity_id}",
        extra=build_log_context(
            location_id=location_id,
            user_id=requested_by,
            action="REQUEST_APPROVAL",
            approval_id=approval.id,
        ),
    )
    return approval


def get_pending_phone_purchase(db: Session, phone_id: str) -> ApprovalRequest | None:
    return (
        db.query(ApprovalRequest)
        .filter(
            ApprovalRequest.type == ApprovalType.PHONE_PURCHASE.value,
            ApprovalRequest.entity_id == phone_id,
            ApprovalRequest.status == ApprovalStatus.PENDING.value,
        )
        .first()
    )


def request_phone_purchase(
    db: Session,
    phone_id: str,
    location_id: str,
    brand: str,
    model: str,
    requested_by: str,
    quantity: int = 1,
    unit_price: float | None = None,
    commit: bool = True,
) -> ApprovalRequest:
    """
    Open a PHONE_PURCHASE approval for an unsupported phone.

    At most one pending approval exists per phone; an existing one is
    returned unchanged.
    """
    existing = get_pending_phone_purchase(db, phone_id)
    if existing:
        return existing

    details: dict[str, Any] = {"brand": brand, "model": model, "quantity": quantity}
    if unit_price is not None:
        details["unit_price"] = unit_price
        details["total_price"] = quantity * unit_price

    return request_approval(
        db,
        ApprovalType.PHONE_PURCHASE,
        location_id=location_id,
        entity_id=phone_id,
        requested_by=requested_by,
        details=details,
        commit=commit,
    )


def _resolve(
    db: Session,
    approval_id: str,
    new_status: ApprovalStatus,
    resolved_by: str,
    comments: str | None,
    now: datetime | None,
) -> ApprovalRequest:
    approval = get_approval(db, approval_id)
    if not approval:
        raise ApprovalNotFoundError(f"Approval {approval_id} not found")
    if approval.status != ApprovalStatus.PENDING.value:
        raise ApprovalStateError(
            f"Approval {approval_id} is not pending (status: {approval.status})"
        )

    approval.status = new_status.value
    approval.resolved_by = resolved_by
    approval.resolved_at = now or utcnow()
    approval.comments = comments

    db.commit()
    db.refresh(approval)

    logger.info(
        f"Approval {approval_id} {new_status.value.lower()}",
        extra=build_log_context(
            location_id=approval.location_id,
            user_id=resolved_by,
            action=f"{new_status.value}_APPROVAL",
            approval_id=approval_id,
        ),
    )
    return approval


def approve(
    db: Session,
    approval_id: str,
    approved_by: str,
    comments: str | None = None,
    now: datetime | None = None,
) -> ApprovalRequest:
    """
    Approve a pending request.

    Raises:
        ApprovalNotFoundError: unknown id
        ApprovalStateError: request is no longer pending
    """
    return _resolve(db, approval_id, ApprovalStatus.APPROVED, approved_by, comments, now)


def reject(
    db: Session,
    approval_id: str,
    rejected_by: str,
    comments: str | None = None,
    now: datetime | None = None,
) -> ApprovalRequest:
    """Reject a pending request. Raises like ``approve``."""
    return _resolve(db, approval_id, ApprovalStatus.REJECTED, rejected_by, comments, now)
