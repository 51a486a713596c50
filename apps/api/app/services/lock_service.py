"""Edit locking for submitted onboarding, with implementation-lead override."""

import logging
from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.constants import LOCKED_STATUSES
from app.core.structured_logging import build_log_context
from app.db.enums import OnboardingStatus, Role
from app.services import onboarding_store
from app.services.errors import NotFoundError, StateConflictError

logger = logging.getLogger(__name__)


class OnboardingLockedError(StateConflictError):
    pass


class OverrideNotPermittedError(StateConflictError):
    pass


class EditCheck(TypedDict):
    allowed: bool
    requires_override: bool
    reason: str | None


def is_locked_status(status: OnboardingStatus | str | None) -> bool:
    if status is None:
        return False
    return OnboardingStatus(status) in LOCKED_STATUSES


def can_override(role: Role | str | None) -> bool:
    """Only implementation leads may edit locked onboarding."""
    if role is None:
        return False
    return getattr(role, "value", role) == Role.IMPLEMENTATION_LEAD.value


def validate_edit(status: OnboardingStatus | str | None, role: Role | str | None) -> EditCheck:
    """
    Decide whether an edit may proceed.

    A lead editing a locked record is allowed, but ``requires_override`` is
    set so the caller has to acknowledge it.
    """
    if not is_locked_status(status):
        return EditCheck(allowed=True, requires_override=False, reason=None)

    if can_override(role):
        return EditCheck(
            allowed=True,
            requires_override=True,
            reason="Onboarding is locked. Override required.",
        )

    return EditCheck(
        allowed=False,
        requires_override=False,
        reason="Onboarding is locked and cannot be edited",
    )


def ensure_editable(
    db: Session,
    location_id: str,
    role: Role | str | None,
    override: bool = False,
    user_id: str | None = None,
) -> EditCheck:
    """
    Raise unless the location's onboarding may be edited by ``role``.

    Raises:
        OnboardingLockedError: locked and either no override authority,
            or override authority without ``override=True``
    """
    onboarding = onboarding_store.get_onboarding(db, location_id)
    status = onboarding.status if onboarding else None
    check = validate_edit(status, role)

    if not check["allowed"]:
        raise OnboardingLockedError(check["reason"])
    if check["requires_override"]:
        if not override:
            raise OnboardingLockedError(check["reason"])
        logger.warning(
            f"Override edit on locked onboarding {location_id}",
            extra=build_log_context(
                location_id=location_id,
                user_id=user_id,
                action="OVERRIDE_EDIT",
                status=status,
            ),
        )
    return check


def lock_onboarding(
    db: Session,
    location_id: str,
    user_id: str | None,
    reason: str = "Submitted for approval",
) -> None:
    """Lock the wizard session for a location (the onboarding status is left alone)."""
    onboarding_store.upsert_session(db, location_id, {"is_locked": True}, commit=False)
    logger.info(
        "Onboarding locked",
        extra=build_log_context(
            location_id=location_id,
            user_id=user_id,
            action="LOCK_ONBOARDING",
            reason=reason,
        ),
    )


def unlock_onboarding(
    db: Session,
    location_id: str,
    user_id: str,
    role: Role | str | None,
    reason: str,
) -> None:
    """
    Reopen a locked onboarding for editing.

    Moves the onboarding back to IN_PROGRESS and clears the session lock.

    Raises:
        OverrideNotPermittedError: caller is not an implementation lead
        NotFoundError: location has no onboarding
    """
    if not can_override(role):
        raise OverrideNotPermittedError("Insufficient permissions to unlock")

    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        raise NotFoundError("Onboarding data not found")

    onboarding_store.upsert_onboarding(
        db, location_id, {"status": OnboardingStatus.IN_PROGRESS.value}, commit=False
    )
    onboarding_store.upsert_session(
        db,
        location_id,
        {"is_locked": False, "status": OnboardingStatus.IN_PROGRESS},
        commit=False,
    )
    db.commit()

    logger.warning(
        f"Onboarding unlocked by override: {reason}",
        extra=build_log_context(
            location_id=location_id,
            user_id=user_id,
            action="UNLOCK_ONBOARDING",
            override=True,
        ),
    )
