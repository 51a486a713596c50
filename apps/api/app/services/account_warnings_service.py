"""Dashboard blockers and warnings per location, rolled up per account.

Calculations fail soft: a location whose data cannot be evaluated reports
the all-clear default instead of breaking the account rollup.
"""

import logging
from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.structured_logging import build_log_context
from app.db.models import Location, LocationOnboarding
from app.services import approval_service, onboarding_store
from app.services.device_ownership import is_missing_devices, resolve_device_ownership

logger = logging.getLogger(__name__)


class LocationBlockers(TypedDict):
    pending_approvals: int
    has_unsupported_phones: bool


class LocationWarningFlags(TypedDict):
    missing_devices: bool
    incomplete_call_flow: bool


class LocationWarnings(TypedDict):
    location_id: str
    blockers: LocationBlockers
    warnings: LocationWarningFlags


class AccountBlockers(TypedDict):
    pending_approvals: int
    locations_with_unsupported_phones: int


class AccountWarningCounts(TypedDict):
    locations_missing_devices: int
    locations_with_incomplete_call_flow: int


class AccountWarnings(TypedDict):
    account_id: str
    blockers: AccountBlockers
    warnings: AccountWarningCounts
    locations: list[LocationWarnings]


def default_location_warnings(location_id: str) -> LocationWarnings:
    return LocationWarnings(
        location_id=location_id,
        blockers=LocationBlockers(pending_approvals=0, has_unsupported_phones=False),
        warnings=LocationWarningFlags(missing_devices=False, incomplete_call_flow=False),
    )


def is_call_flow_incomplete(onboarding: LocationOnboarding | None) -> bool:
    if onboarding is None:
        return False
    if onboarding.has_ivr:
        options = onboarding.ivr_options or []
        if not options:
            return True
        return any(not option.get("targets") for option in options)
    return not onboarding.direct_ring_users and not onboarding.direct_ring_extensions


def _calculate(db: Session, location_id: str) -> LocationWarnings:
    onboarding = onboarding_store.get_onboarding(db, location_id)
    phones = onboarding_store.get_phones(db, location_id)

    missing_devices = False
    if onboarding is not None:
        missing_devices = is_missing_devices(resolve_device_ownership(onboarding), len(phones))

    return LocationWarnings(
        location_id=location_id,
        blockers=LocationBlockers(
            pending_approvals=approval_service.count_pending_approvals(db, location_id),
            has_unsupported_phones=any(phone.is_unsupported for phone in phones),
        ),
        warnings=LocationWarningFlags(
            missing_devices=missing_devices,
            incomplete_call_flow=is_call_flow_incomplete(onboarding),
        ),
    )


def calculate_location_warnings(db: Session, location_id: str) -> LocationWarnings:
    """Blockers and warnings for one location. Never raises."""
    try:
        return _calculate(db, location_id)
    except Exception:
        logger.exception(
            f"Error calculating location warnings for {location_id}",
            extra=build_log_context(location_id=location_id, action="CALCULATE_WARNINGS"),
        )
        return default_location_warnings(location_id)


def calculate_account_warnings(db: Session, account_id: str) -> AccountWarnings:
    """Roll location warnings up into per-account location counts."""
    location_ids = [
        row[0]
        for row in db.query(Location.id)
        .filter(Location.account_id == account_id)
        .order_by(Location.created_at, Location.id)
        .all()
    ]

    result = AccountWarnings(
        account_id=account_id,
        blockers=AccountBlockers(pending_approvals=0, locations_with_unsupported_phones=0),
        warnings=AccountWarningCounts(
            locations_missing_devices=0,
            locations_with_incomplete_call_flow=0,
        ),
        locations=[],
    )

    for location_id in location_ids:
        location_warnings = calculate_location_warnings(db, location_id)
        result["locations"].append(location_warnings)

        result["blockers"]["pending_approvals"] += location_warnings["blockers"]["pending_approvals"]
        if location_warnings["blockers"]["has_unsupported_phones"]:
            result["blockers"]["locations_with_unsupported_phones"] += 1
        if location_warnings["warnings"]["missing_devices"]:
            result["warnings"]["locations_missing_devices"] += 1
        if location_warnings["warnings"]["incomplete_call_flow"]:
            result["warnings"]["locations_with_incomplete_call_flow"] += 1

    return result
