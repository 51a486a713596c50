"""Wizard session: current step, completed steps, status and lock."""

import logging
from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.constants import LOCKED_STATUSES, REQUIRED_SUBMISSION_STEPS, STEP_ORDER
from app.core.structured_logging import build_log_context
from app.db.enums import OnboardingStatus, OnboardingStep
from app.db.models import LocationOnboarding, OnboardingSession
from app.services import approval_service, onboarding_store, validation_service
from app.services.errors import StateConflictError

logger = logging.getLogger(__name__)


class SessionLockedError(StateConflictError):
    pass


class InferredProgress(TypedDict):
    current_step: OnboardingStep
    completed_steps: list[OnboardingStep]
    status: OnboardingStatus
    is_locked: bool


class CanSubmitResult(TypedDict):
    can_submit: bool
    reasons: list[str]


def get_next_step(step: OnboardingStep) -> OnboardingStep | None:
    index = STEP_ORDER.index(OnboardingStep(step))
    if index == len(STEP_ORDER) - 1:
        return None
    return STEP_ORDER[index + 1]


def get_previous_step(step: OnboardingStep) -> OnboardingStep | None:
    index = STEP_ORDER.index(OnboardingStep(step))
    if index == 0:
        return None
    return STEP_ORDER[index - 1]


def infer_session_progress(
    onboarding: LocationOnboarding | None,
    phone_count: int,
) -> InferredProgress:
    """
    Rebuild wizard progress from which onboarding fields are filled in.

    Each check that passes marks its step complete and moves the current
    step to the one after it. Later checks win, so a gap (e.g. devices
    missing but working hours set) still lands on the furthest step.
    """
    current_step = OnboardingStep.BASIC_DETAILS
    completed: list[OnboardingStep] = []

    def mark(step: OnboardingStep, next_step: OnboardingStep) -> None:
        nonlocal current_step
        completed.append(step)
        current_step = next_step

    if onboarding is not None:
        if onboarding.poc_name and onboarding.poc_email:
            mark(OnboardingStep.BASIC_DETAILS, OnboardingStep.PHONE_SYSTEM)
        if onboarding.phone_system_type:
            mark(OnboardingStep.PHONE_SYSTEM, OnboardingStep.DEVICES)
        if onboarding.total_devices is not None and phone_count > 0:
            mark(OnboardingStep.DEVICES, OnboardingStep.WORKING_HOURS)
        if onboarding.working_hours:
            mark(OnboardingStep.WORKING_HOURS, OnboardingStep.CALL_FLOW)
        if (
            onboarding.has_ivr is not None
            or onboarding.direct_ring_users is not None
            or onboarding.direct_ring_extensions is not None
        ):
            mark(OnboardingStep.CALL_FLOW, OnboardingStep.CALL_QUEUE)
        if onboarding.call_queue:
            mark(OnboardingStep.CALL_QUEUE, OnboardingStep.USERS)

    status = OnboardingStatus(onboarding.status) if onboarding else OnboardingStatus.NOT_STARTED
    return InferredProgress(
        current_step=current_step,
        completed_steps=completed,
        status=status,
        is_locked=status in LOCKED_STATUSES,
    )


def get_or_create_session(db: Session, location_id: str) -> OnboardingSession:
    """Return the persisted session, or build one from the onboarding data."""
    session = onboarding_store.get_session(db, location_id)
    if session is not None:
        return session

    onboarding = onboarding_store.get_onboarding(db, location_id)
    progress = infer_session_progress(onboarding, onboarding_store.count_phones(db, location_id))
    return onboarding_store.upsert_session(db, location_id, dict(progress))


def _ensure_unlocked(session: OnboardingSession) -> None:
    if session.is_locked:
        raise SessionLockedError("Onboarding session is locked and cannot be modified")


def update_step(db: Session, location_id: str, step: OnboardingStep) -> OnboardingSession:
    """
    Navigate to ``step``, marking the step being left as completed.

    Raises:
        SessionLockedError: session is locked
    """
    session = get_or_create_session(db, location_id)
    _ensure_unlocked(session)

    completed = list(session.completed_steps or [])
    if session.current_step not in completed:
        completed.append(session.current_step)

    return onboarding_store.upsert_session(
        db,
        location_id,
        {
            "completed_steps": completed,
            "current_step": OnboardingStep(step),
            "status": OnboardingStatus.IN_PROGRESS,
        },
    )


def complete_step(db: Session, location_id: str, step: OnboardingStep) -> OnboardingSession:
    """
    Mark ``step`` complete; completing the current step advances to the next one.

    Raises:
        SessionLockedError: session is locked
    """
    step = OnboardingStep(step)
    session = get_or_create_session(db, location_id)
    _ensure_unlocked(session)

    completed = list(session.completed_steps or [])
    if step.value not in completed:
        completed.append(step.value)

    current_step = OnboardingStep(session.current_step)
    if step == current_step:
        current_step = get_next_step(step) or current_step

    return onboarding_store.upsert_session(
        db,
        location_id,
        {
            "completed_steps": completed,
            "current_step": current_step,
            "status": OnboardingStatus.IN_PROGRESS,
        },
    )


def update_status(
    db: Session,
    location_id: str,
    status: OnboardingStatus,
    lock_session: bool = False,
    commit: bool = True,
) -> OnboardingSession:
    """Set the session status. The lock is only ever turned on here, never off."""
    session = get_or_create_session(db, location_id)
    return onboarding_store.upsert_session(
        db,
        location_id,
        {
            "status": OnboardingStatus(status),
            "is_locked": lock_session or session.is_locked,
        },
        commit=commit,
    )


def can_submit(db: Session, location_id: str) -> CanSubmitResult:
    """Collect every reason the location cannot be submitted yet."""
    session = get_or_create_session(db, location_id)
    reasons: list[str] = []

    if session.is_locked:
        reasons.append("Session is locked")

    completed = set(session.completed_steps or [])
    missing = [step.value for step in REQUIRED_SUBMISSION_STEPS if step.value not in completed]
    if missing:
        reasons.append(f"Missing steps: {', '.join(missing)}")

    pending = approval_service.count_pending_approvals(db, location_id)
    if pending:
        reasons.append(f"Pending approvals required ({pending} approval(s) pending)")

    validation = validation_service.validate_onboarding_for_submission(db, location_id)
    if not validation["is_valid"]:
        reasons.extend(validation["errors"])

    return CanSubmitResult(can_submit=not reasons, reasons=reasons)


def reset_session(db: Session, location_id: str) -> None:
    """Drop the persisted session; the next read rebuilds it from onboarding data."""
    session = onboarding_store.get_session(db, location_id)
    if session is None:
        return
    db.delete(session)
    db.commit()
    logger.info(
        "Onboarding session reset",
        extra=build_log_context(location_id=location_id, action="RESET_SESSION"),
    )
