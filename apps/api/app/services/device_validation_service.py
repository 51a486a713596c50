"""Device support validation and per-device warnings."""

from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.constants import SYSTEM_ACTOR_ID
from app.core.master_data import get_supported_phone_models, is_phone_model_supported
from app.db.enums import PhoneAssignmentType, PhoneBrand
from app.db.models import Phone
from app.services import approval_service


class DeviceValidationResult(TypedDict, total=False):
    is_valid: bool
    is_supported: bool
    brand: str
    model: str
    message: str


class DeviceWarnings(TypedDict):
    has_warnings: bool
    warning_reason: str | None


class MarkDeviceResult(TypedDict):
    phone: Phone
    requires_approval: bool
    approval_id: str | None


def _brand_str(brand: PhoneBrand | str | None) -> str:
    if brand is None:
        return ""
    return getattr(brand, "value", brand)


def validate_device(brand: PhoneBrand | str | None, model: str | None) -> DeviceValidationResult:
    """
    Classify a (brand, model) pair.

    Only Yealink and Polycom are supported brands, and only for models on
    their active list (exact, case-sensitive). Every other brand is
    unsupported whatever the model says.
    """
    brand_value = _brand_str(brand)
    model_value = model or ""

    if is_phone_model_supported(brand_value, model_value):
        return DeviceValidationResult(
            is_valid=True,
            is_supported=True,
            brand=brand_value,
            model=model_value,
        )

    return DeviceValidationResult(
        is_valid=False,
        is_supported=False,
        brand=brand_value,
        model=model_value,
        message=(
            f"{brand_value} {model_value} is not a supported device. "
            "Please purchase a supported device or choose a different model."
        ),
    )


def compute_device_warnings(phone: Phone) -> DeviceWarnings:
    """Non-blocking warnings: missing device types or missing assignment target."""
    reasons: list[str] = []

    if not phone.device_types:
        reasons.append("Device type is not selected")

    assignment = PhoneAssignmentType(phone.assignment_type)
    if assignment == PhoneAssignmentType.ASSIGNED_TO_USER and not phone.assigned_user_id:
        reasons.append("Device is assigned to a user but no user is selected")
    elif assignment.targets_extension and not phone.extension:
        reasons.append("Device is assigned to an extension but no extension is set")

    return DeviceWarnings(
        has_warnings=bool(reasons),
        warning_reason="; ".join(reasons) if reasons else None,
    )


def apply_device_warnings(phone: Phone) -> Phone:
    warnings = compute_device_warnings(phone)
    phone.has_warnings = warnings["has_warnings"]
    phone.warning_reason = warnings["warning_reason"]
    return phone


def validate_and_mark_device(
    db: Session,
    phone: Phone,
    requested_by: str = SYSTEM_ACTOR_ID,
) -> MarkDeviceResult:
    """
    Recompute ``is_unsupported`` on a phone and open a purchase approval if needed.

    The phone must already be flushed (it needs an id). Nothing is committed.
    """
    validation = validate_device(phone.brand, phone.model)
    phone.is_unsupported = not validation["is_supported"]

    if validation["is_supported"]:
        return MarkDeviceResult(phone=phone, requires_approval=False, approval_id=None)

    approval = approval_service.request_phone_purchase(
        db,
        phone_id=phone.id,
        location_id=phone.location_id,
        brand=phone.brand,
        model=phone.model,
        requested_by=requested_by,
        commit=False,
    )
    return MarkDeviceResult(phone=phone, requires_approval=True, approval_id=approval.id)


def get_supported_models(brand: PhoneBrand | str | None = None) -> list[dict[str, str]]:
    return [
        {"brand": m.brand.value, "model": m.model, "description": m.description}
        for m in get_supported_phone_models(brand)
    ]


def get_unsupported_devices(db: Session, location_id: str) -> list[Phone]:
    return (
        db.query(Phone)
        .filter(Phone.location_id == location_id, Phone.is_unsupported.is_(True))
        .order_by(Phone.created_at, Phone.id)
        .all()
    )


def has_unsupported_devices(db: Session, location_id: str) -> bool:
    return len(get_unsupported_devices(db, location_id)) > 0
