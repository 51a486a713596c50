"""Onboarding edits: lock check, auto-filled answers, merge into the store."""

import logging
from typing import Any, TypedDict

from sqlalchemy.orm import Session

from app.core.structured_logging import build_log_context
from app.db.enums import OnboardingStatus, Role
from app.db.models import LocationOnboarding
from app.services import lock_service, onboarding_store, skip_rule_service
from app.services.errors import LocationNotFoundError

logger = logging.getLogger(__name__)


class OnboardingUpdateResult(TypedDict):
    onboarding: LocationOnboarding
    requires_override: bool


def _autofill_call_forwarding(
    existing: LocationOnboarding | None,
    patch: dict[str, Any],
) -> None:
    """Fill ``call_forwarding_supported`` from master data when the phone system is known."""
    if "call_forwarding_supported" in patch:
        return
    if "phone_system_type" not in patch and "phone_system_voip_type" not in patch:
        return

    phone_system_type = patch.get(
        "phone_system_type", existing.phone_system_type if existing else None
    )
    phone_system_name = patch.get(
        "phone_system_voip_type", existing.phone_system_voip_type if existing else None
    )
    known = skip_rule_service.get_call_forwarding_support(phone_system_type, phone_system_name)
    if known is not None:
        patch["call_forwarding_supported"] = known


def update_onboarding(
    db: Session,
    location_id: str,
    patch: dict[str, Any],
    role: Role | str | None,
    user_id: str | None = None,
    override: bool = False,
) -> OnboardingUpdateResult:
    """
    Merge a partial update into a location's onboarding.

    The first edit moves a NOT_STARTED onboarding to IN_PROGRESS. Status
    itself is never taken from the patch.

    Raises:
        LocationNotFoundError: unknown location
        OnboardingLockedError: onboarding is locked for this caller
    """
    if onboarding_store.get_location(db, location_id) is None:
        raise LocationNotFoundError(f"Location {location_id} not found")

    check = lock_service.ensure_editable(db, location_id, role, override=override, user_id=user_id)

    patch = {k: v for k, v in patch.items() if k != "status"}
    existing = onboarding_store.get_onboarding(db, location_id)
    _autofill_call_forwarding(existing, patch)

    if existing is None or existing.status == OnboardingStatus.NOT_STARTED.value:
        patch["status"] = OnboardingStatus.IN_PROGRESS.value

    onboarding = onboarding_store.upsert_onboarding(db, location_id, patch)
    logger.debug(
        f"Onboarding updated: {sorted(patch)}",
        extra=build_log_context(location_id=location_id, user_id=user_id, action="UPDATE_ONBOARDING"),
    )
    return OnboardingUpdateResult(
        onboarding=onboarding,
        requires_override=check["requires_override"],
    )
