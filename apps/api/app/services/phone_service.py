"""Phone (device) writes.

Every write re-derives ``is_unsupported``, ``has_warnings`` and
``warning_reason``; those are never taken from the client.
"""

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import SYSTEM_ACTOR_ID
from app.db.enums import PhoneAssignmentType
from app.db.models import Phone, User
from app.services import device_validation_service
from app.services.device_validation_service import MarkDeviceResult
from app.services.errors import (
    InvalidRequestError,
    LocationNotFoundError,
    NotFoundError,
    StateConflictError,
)
from app.services.onboarding_store import get_location, get_phones

DERIVED_FIELDS = ("is_unsupported", "has_warnings", "warning_reason")
EXTENSION_CONSTRAINT_MARKERS = ("uq_phones_location_extension", "phones.location_id, phones.extension")


class PhoneNotFoundError(NotFoundError):
    pass


class DuplicateExtensionError(StateConflictError):
    pass


class AssignedUserNotFoundError(InvalidRequestError):
    pass


def get_phone(db: Session, location_id: str, phone_id: str) -> Phone | None:
    return (
        db.query(Phone)
        .filter(Phone.id == phone_id, Phone.location_id == location_id)
        .first()
    )


def list_phones(db: Session, location_id: str) -> list[Phone]:
    return get_phones(db, location_id)


def _apply_fields(phone: Phone, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if key in DERIVED_FIELDS or not hasattr(Phone, key):
            continue
        if key == "assignment_type" and value is not None:
            value = PhoneAssignmentType.normalize(value).value
        elif key == "device_types" and value is not None:
            value = [getattr(item, "value", item) for item in value]
        elif hasattr(value, "value"):
            value = value.value
        setattr(phone, key, value)


def _is_extension_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in EXTENSION_CONSTRAINT_MARKERS)


def _save(
    db: Session,
    phone: Phone,
    requested_by: str,
) -> MarkDeviceResult:
    if phone.assigned_user_id and db.get(User, phone.assigned_user_id) is None:
        db.rollback()
        raise AssignedUserNotFoundError(f"User {phone.assigned_user_id} not found")

    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        if not _is_extension_conflict(e):
            raise
        raise DuplicateExtensionError(
            f"Extension {phone.extension} is already assigned at this location"
        )

    result = device_validation_service.validate_and_mark_device(db, phone, requested_by)
    device_validation_service.apply_device_warnings(phone)
    db.commit()
    db.refresh(phone)
    return result


def create_phone(
    db: Session,
    location_id: str,
    data: dict[str, Any],
    requested_by: str = SYSTEM_ACTOR_ID,
) -> MarkDeviceResult:
    """
    Add a phone to a location.

    Raises:
        LocationNotFoundError: unknown location
        AssignedUserNotFoundError: assigned_user_id names no user
        DuplicateExtensionError: extension already held at the location
    """
    if get_location(db, location_id) is None:
        raise LocationNotFoundError(f"Location {location_id} not found")

    phone = Phone(location_id=location_id, device_types=[])
    _apply_fields(phone, data)
    db.add(phone)
    return _save(db, phone, requested_by)


def update_phone(
    db: Session,
    location_id: str,
    phone_id: str,
    data: dict[str, Any],
    requested_by: str = SYSTEM_ACTOR_ID,
) -> MarkDeviceResult:
    """Patch a phone; support and warnings are recomputed from the merged state."""
    phone = get_phone(db, location_id, phone_id)
    if phone is None:
        raise PhoneNotFoundError(f"Phone {phone_id} not found")

    _apply_fields(phone, data)
    return _save(db, phone, requested_by)


def delete_phone(db: Session, location_id: str, phone_id: str) -> None:
    phone = get_phone(db, location_id, phone_id)
    if phone is None:
        raise PhoneNotFoundError(f"Phone {phone_id} not found")
    db.delete(phone)
    db.commit()
