"""Copy contact details from another location of the same account."""

import logging
from typing import Any, TypedDict

from sqlalchemy.orm import Session

from app.core.constants import COPYABLE_FIELDS
from app.core.structured_logging import build_log_context
from app.db.enums import OnboardingStatus
from app.db.models import Location, LocationOnboarding
from app.services import onboarding_store
from app.services.errors import InvalidRequestError, LocationNotFoundError

logger = logging.getLogger(__name__)


class CopyLocationError(InvalidRequestError):
    pass


class SourceLocation(TypedDict):
    id: str
    name: str
    has_onboarding: bool


def copy_from_previous_location(
    db: Session,
    from_location_id: str,
    to_location_id: str,
    fields_to_copy: list[str],
    user_id: str | None = None,
) -> LocationOnboarding:
    """
    Copy the requested copyable fields onto the target location's onboarding.

    Unknown field names are ignored; unset source values are not copied.

    Raises:
        LocationNotFoundError: target location missing
        CopyLocationError: source has no onboarding, locations belong to
            different accounts, or nothing copyable was requested
    """
    target = onboarding_store.get_location(db, to_location_id)
    if target is None:
        raise LocationNotFoundError(f"Target location {to_location_id} not found")

    source_location = onboarding_store.get_location(db, from_location_id)
    if source_location is None or source_location.account_id != target.account_id:
        raise CopyLocationError(
            f"Source location {from_location_id} is not part of the same account"
        )

    source = onboarding_store.get_onboarding(db, from_location_id)
    if source is None:
        raise CopyLocationError(f"Source location {from_location_id} has no onboarding data")

    valid_fields = [field for field in fields_to_copy if field in COPYABLE_FIELDS]
    if not valid_fields:
        raise CopyLocationError("No valid fields to copy")

    patch: dict[str, Any] = {}
    for field in valid_fields:
        value = getattr(source, field)
        if value is not None:
            patch[field] = value
    patch["copied_from_location_id"] = from_location_id

    onboarding = onboarding_store.upsert_onboarding(db, to_location_id, patch)

    logger.info(
        f"Copied {len(patch) - 1} field(s) from {from_location_id}",
        extra=build_log_context(
            location_id=to_location_id,
            user_id=user_id,
            action="COPY_ONBOARDING",
            copied_fields=sorted(k for k in patch if k != "copied_from_location_id"),
        ),
    )
    return onboarding


def get_copyable_fields(db: Session, location_id: str) -> dict[str, Any]:
    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        return {}
    return {
        field: getattr(onboarding, field)
        for field in COPYABLE_FIELDS
        if getattr(onboarding, field) is not None
    }


def get_available_source_locations(db: Session, target_location_id: str) -> list[SourceLocation]:
    """Other locations of the same account, flagged if they have started onboarding."""
    target = onboarding_store.get_location(db, target_location_id)
    if target is None:
        return []

    locations = (
        db.query(Location)
        .filter(Location.account_id == target.account_id, Location.id != target_location_id)
        .order_by(Location.created_at, Location.id)
        .all()
    )
    result: list[SourceLocation] = []
    for location in locations:
        onboarding = onboarding_store.get_onboarding(db, location.id)
        result.append(
            SourceLocation(
                id=location.id,
                name=location.name,
                has_onboarding=(
                    onboarding is not None
                    and onboarding.status != OnboardingStatus.NOT_STARTED.value
                ),
            )
        )
    return result
