"""Submission and status automation for location onboarding."""

import logging
from datetime import datetime
from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.constants import LOCKED_STATUSES
from app.core.structured_logging import build_log_context
from app.db.base import utcnow
from app.db.enums import ApprovalStatus, OnboardingStatus
from app.db.models import ApprovalRequest, Location, LocationOnboarding
from app.schemas.provisioning import ProvisioningPayload
from app.services import (
    lock_service,
    onboarding_session_service,
    onboarding_store,
    provisioning_service,
)
from app.services.errors import NotFoundError, StateConflictError

logger = logging.getLogger(__name__)


class SubmissionBlockedError(StateConflictError):
    """Submission gate failed; ``reasons`` lists every failing check."""

    def __init__(self, reasons: list[str]):
        self.reasons = reasons
        super().__init__("Cannot submit onboarding")


class SubmissionResult(TypedDict):
    location_id: str
    status: OnboardingStatus
    payload: ProvisioningPayload
    payload_valid: bool
    payload_errors: list[str]


def submit_onboarding(
    db: Session,
    location_id: str,
    user_id: str,
    now: datetime | None = None,
) -> SubmissionResult:
    """
    Submit a location for approval.

    Moves onboarding and session to PENDING_APPROVAL, locks the session,
    stamps ``submitted_at`` and generates the provisioning payload.

    Raises:
        SubmissionBlockedError: ``can_submit`` reported reasons
    """
    check = onboarding_session_service.can_submit(db, location_id)
    if not check["can_submit"]:
        raise SubmissionBlockedError(check["reasons"])

    now = now or utcnow()
    onboarding_store.upsert_onboarding(
        db,
        location_id,
        {"status": OnboardingStatus.PENDING_APPROVAL.value, "submitted_at": now},
        commit=False,
    )
    onboarding_session_service.update_status(
        db, location_id, OnboardingStatus.PENDING_APPROVAL, lock_session=True, commit=False
    )
    lock_service.lock_onboarding(db, location_id, user_id, "Submitted for approval")
    db.commit()

    result = provisioning_service.generate_and_validate(db, location_id, now=now)
    logger.info(
        "Onboarding submitted",
        extra=build_log_context(
            location_id=location_id,
            user_id=user_id,
            action="SUBMIT_ONBOARDING",
            payload_valid=result["valid"],
        ),
    )
    return SubmissionResult(
        location_id=location_id,
        status=OnboardingStatus.PENDING_APPROVAL,
        payload=result["payload"],
        payload_valid=result["valid"],
        payload_errors=result["errors"],
    )


def transition_status(
    db: Session,
    location_id: str,
    status: OnboardingStatus,
    user_id: str | None = None,
    lock_session: bool = False,
    now: datetime | None = None,
) -> LocationOnboarding:
    """
    Move onboarding and session to ``status`` together.

    Locked statuses always lock the session. COMPLETED stamps
    ``completed_at`` and checks whether the whole account is done.
    """
    status = OnboardingStatus(status)
    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        raise NotFoundError("Onboarding data not found")

    patch: dict = {"status": status.value}
    if status == OnboardingStatus.COMPLETED:
        patch["completed_at"] = now or utcnow()
    onboarding = onboarding_store.upsert_onboarding(db, location_id, patch, commit=False)
    onboarding_session_service.update_status(
        db,
        location_id,
        status,
        lock_session=lock_session or status in LOCKED_STATUSES,
        commit=False,
    )
    db.commit()
    db.refresh(onboarding)

    logger.info(
        f"Onboarding status changed to {status.value}",
        extra=build_log_context(location_id=location_id, user_id=user_id, action="STATUS_CHANGE"),
    )

    if status == OnboardingStatus.COMPLETED:
        location = onboarding_store.get_location(db, location_id)
        if location is not None:
            check_all_locations_completed(db, location.account_id)
    return onboarding


def on_approval_resolved(db: Session, approval: ApprovalRequest, user_id: str) -> None:
    """
    React to an approval decision.

    A rejection blocks and locks the location. An approval reopens a
    blocked location.
    """
    location_id = approval.location_id
    if onboarding_store.get_onboarding(db, location_id) is None:
        return

    if approval.status == ApprovalStatus.REJECTED.value:
        transition_status(db, location_id, OnboardingStatus.BLOCKED, user_id, lock_session=True)
        return

    if approval.status == ApprovalStatus.APPROVED.value:
        session = onboarding_session_service.get_or_create_session(db, location_id)
        if session.status != OnboardingStatus.BLOCKED.value:
            return
        onboarding_store.upsert_onboarding(
            db, location_id, {"status": OnboardingStatus.IN_PROGRESS.value}, commit=False
        )
        # Explicit unblock; update_status never clears the lock
        onboarding_store.upsert_session(
            db,
            location_id,
            {"status": OnboardingStatus.IN_PROGRESS, "is_locked": False},
            commit=False,
        )
        db.commit()
        logger.info(
            "Blocked onboarding reopened after approval",
            extra=build_log_context(
                location_id=location_id,
                user_id=user_id,
                action="UNBLOCK_ONBOARDING",
                approval_id=approval.id,
            ),
        )


def check_all_locations_completed(db: Session, account_id: str) -> bool:
    """True when the account has locations and every one is COMPLETED."""
    location_ids = [
        row[0] for row in db.query(Location.id).filter(Location.account_id == account_id).all()
    ]
    if not location_ids:
        return False

    completed = (
        db.query(LocationOnboarding)
        .filter(
            LocationOnboarding.location_id.in_(location_ids),
            LocationOnboarding.status == OnboardingStatus.COMPLETED.value,
        )
        .count()
    )
    all_completed = completed == len(location_ids)
    if all_completed:
        logger.info(
            "All locations completed; account ready for provisioning",
            extra=build_log_context(account_id=account_id, action="ALL_LOCATIONS_COMPLETED"),
        )
    return all_completed
