"""Submission validation for location onboarding.

Validators return result dicts and never raise, so callers can show every
problem at once. ``validate_onboarding_for_submission`` is the gate before
an onboarding can move to PENDING_APPROVAL.
"""

import re
from collections import defaultdict
from typing import Any, Iterable, TypedDict

from sqlalchemy.orm import Session

from app.db.enums import PhoneAssignmentType
from app.db.models import LocationOnboarding, Phone
from app.services import onboarding_store
from app.services.device_ownership import (
    BrandQuestionUnanswered,
    CatalogPurchase,
    ManualEntry,
    OwnershipUnanswered,
    PurchaseUndecided,
    resolve_device_ownership,
)

TIME_PATTERN = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")


class ValidationResult(TypedDict):
    is_valid: bool
    errors: list[str]
    warnings: list[str]


def _result(errors: list[str], warnings: list[str] | None = None) -> ValidationResult:
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings or [])


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# =============================================================================
# Time helpers
# =============================================================================

def validate_time_format(value: str | None) -> bool:
    """True for a 24-hour ``HH:mm`` string."""
    return bool(value) and TIME_PATTERN.match(value) is not None


def _to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def time_ranges_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Half-open overlap test; malformed times never overlap."""
    if not all(validate_time_format(v) for v in (start1, end1, start2, end2)):
        return False
    return _to_minutes(start1) < _to_minutes(end2) and _to_minutes(start2) < _to_minutes(end1)


# =============================================================================
# Working hours
# =============================================================================

def _day_label(day: Any) -> str:
    return str(getattr(day, "value", day)).capitalize()


def validate_working_hours_overlaps(entries: Iterable[dict[str, Any]] | None) -> ValidationResult:
    """
    Validate a week of shifts.

    Each open shift needs well-formed times with open before close; shifts
    on the same day must not overlap; at least one day must be open.
    """
    errors: list[str] = []
    shifts_by_day: dict[str, list[tuple[str, str]]] = defaultdict(list)
    any_open = False

    for entry in entries or []:
        if not entry.get("is_open"):
            continue
        any_open = True
        day = _day_label(entry.get("day_of_week"))
        open_time = entry.get("open_time")
        close_time = entry.get("close_time")

        if not validate_time_format(open_time) or not validate_time_format(close_time):
            errors.append(f"{day}: open and close times must use HH:mm (24-hour) format")
            continue
        if _to_minutes(open_time) >= _to_minutes(close_time):
            errors.append(f"{day}: open time must be before close time")
            continue
        shifts_by_day[day].append((open_time, close_time))

    for day, shifts in shifts_by_day.items():
        for i in range(len(shifts)):
            for j in range(i + 1, len(shifts)):
                if time_ranges_overlap(*shifts[i], *shifts[j]):
                    errors.append(
                        f"{day}: shifts {shifts[i][0]}-{shifts[i][1]} and "
                        f"{shifts[j][0]}-{shifts[j][1]} overlap"
                    )

    if not any_open:
        errors.append("At least one day must be open")

    return _result(errors)


# =============================================================================
# Call flow
# =============================================================================

def _has_target(target: dict[str, Any]) -> bool:
    return not _blank(target.get("user_id")) or not _blank(target.get("extension"))


def validate_call_flow(onboarding: LocationOnboarding) -> ValidationResult:
    """IVR or direct-routing structure, plus greeting/voicemail recommendations."""
    errors: list[str] = []
    warnings: list[str] = []

    if _blank(onboarding.greeting_message):
        warnings.append("Greeting message is recommended")

    if onboarding.has_ivr:
        if _blank(onboarding.ivr_script):
            errors.append("IVR script is required when IVR is enabled")

        retry_attempts = onboarding.ivr_retry_attempts
        if retry_attempts is not None and retry_attempts < 0:
            errors.append("IVR retry attempts cannot be negative")
        if onboarding.ivr_wait_time is not None and onboarding.ivr_wait_time < 0:
            errors.append("IVR wait time cannot be negative")
        if retry_attempts and retry_attempts > 0 and _blank(onboarding.ivr_after_retries_target):
            errors.append("A destination after retries is required when IVR retries are enabled")

        options = onboarding.ivr_options or []
        if not options:
            errors.append("At least one IVR option is required when IVR is enabled")
        for index, option in enumerate(options, start=1):
            label = option.get("option_number") or f"#{index}"
            if _blank(option.get("option_number")):
                errors.append(f"IVR option {index} is missing an option number")
            if not any(_has_target(t) for t in option.get("targets") or []):
                errors.append(f"IVR option {label} must have at least one user or extension target")
    else:
        if not onboarding.direct_ring_users and not onboarding.direct_ring_extensions:
            errors.append(
                "At least one direct routing target (user or extension) is required when IVR is disabled"
            )
        if _blank(onboarding.voicemail_script):
            warnings.append("Voicemail script is recommended")

    return _result(errors, warnings)


# =============================================================================
# Sections
# =============================================================================

def _validate_basic_details(onboarding: LocationOnboarding, errors: list[str]) -> None:
    if _blank(onboarding.poc_name):
        errors.append("POC name is required")
    if _blank(onboarding.poc_email):
        errors.append("POC email is required")
    if _blank(onboarding.poc_phone):
        errors.append("POC phone is required")


def _validate_phone_system(onboarding: LocationOnboarding, errors: list[str]) -> None:
    if _blank(onboarding.phone_system_type):
        errors.append("Phone system type is required")

    if onboarding.uses_fax is None:
        errors.append("Please specify whether you use fax")
    elif onboarding.uses_fax:
        if _blank(onboarding.fax_number):
            errors.append("Fax number is required when you use fax")
    elif onboarding.wants_fax_in_voicestack is None:
        errors.append("VoiceStack fax question must be answered when you do not use fax")


def _validate_catalog(selections: Iterable[dict[str, Any]], errors: list[str], warnings: list[str]) -> None:
    selections = list(selections)
    if not selections:
        errors.append("At least one device must be selected from the catalog")
        return
    for index, selection in enumerate(selections, start=1):
        if _blank(selection.get("brand")) or _blank(selection.get("model")):
            errors.append(f"Catalog selection {index} must have a brand and model")
        if (selection.get("quantity") or 0) <= 0:
            errors.append(f"Catalog selection {index} must have a quantity greater than zero")
        if not selection.get("device_types"):
            warnings.append(f"Catalog selection {index} has no device type selected")


def _phone_label(phone: Phone) -> str:
    return f"{phone.brand} {phone.model}".strip()


def _validate_phones(phones: list[Phone], errors: list[str], warnings: list[str]) -> None:
    if not phones:
        errors.append("At least one device is required")
        return
    for phone in phones:
        label = _phone_label(phone)
        if not phone.device_types:
            errors.append(f"Device {label} must have at least one device type")

        assignment = PhoneAssignmentType(phone.assignment_type)
        if assignment == PhoneAssignmentType.ASSIGNED_TO_USER and _blank(phone.assigned_user_id):
            errors.append(f"Device {label} is assigned to a user but no user is selected")
        elif assignment.targets_extension and _blank(phone.extension):
            errors.append(f"Device {label} is assigned to an extension but no extension is set")

        if phone.is_unsupported:
            errors.append(f"Device {label} is not supported and must be replaced or approved")
        if phone.has_warnings and phone.warning_reason:
            warnings.append(f"Device {label}: {phone.warning_reason}")


def _validate_devices(
    onboarding: LocationOnboarding,
    phones: list[Phone],
    errors: list[str],
    warnings: list[str],
) -> None:
    decision = resolve_device_ownership(onboarding)

    if isinstance(decision, OwnershipUnanswered):
        errors.append("Please specify whether you already own phones")
    elif isinstance(decision, BrandQuestionUnanswered):
        errors.append("Please specify whether your phones are Yealink or Polycom")
    elif isinstance(decision, PurchaseUndecided):
        errors.append("Please specify whether you want to buy phones through VoiceStack")
    elif isinstance(decision, CatalogPurchase):
        _validate_catalog(decision.selections, errors, warnings)
    elif isinstance(decision, ManualEntry):
        _validate_phones(phones, errors, warnings)


# =============================================================================
# Submission gate
# =============================================================================

def validate_onboarding(onboarding: LocationOnboarding, phones: list[Phone]) -> ValidationResult:
    """Run the full rule set over an onboarding snapshot. Pure."""
    errors: list[str] = []
    warnings: list[str] = []

    _validate_basic_details(onboarding, errors)
    _validate_phone_system(onboarding, errors)
    _validate_devices(onboarding, phones, errors, warnings)

    call_flow = validate_call_flow(onboarding)
    errors.extend(call_flow["errors"])
    warnings.extend(call_flow["warnings"])

    working_hours = validate_working_hours_overlaps(onboarding.working_hours)
    errors.extend(working_hours["errors"])

    return _result(errors, warnings)


def validate_onboarding_for_submission(db: Session, location_id: str) -> ValidationResult:
    """Validate a location's onboarding before submission."""
    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        return _result(["Onboarding data not found"])
    return validate_onboarding(onboarding, onboarding_store.get_phones(db, location_id))


def validate_working_hours(db: Session, location_id: str) -> ValidationResult:
    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        return _result(["No onboarding data found for location"])
    return validate_working_hours_overlaps(onboarding.working_hours)


def validate_call_flow_for_location(db: Session, location_id: str) -> ValidationResult:
    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        return _result(["No onboarding data found for location"])
    return validate_call_flow(onboarding)
