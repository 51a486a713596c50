"""Provisioning payload generation.

Turns a location, its account, onboarding and phones into the versioned
payload consumed by the provisioning system. Output depends only on the
stored data and the ``now`` passed in.
"""

import logging
from datetime import datetime, timezone
from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.structured_logging import build_log_context
from app.db.base import utcnow
from app.db.enums import (
    EXTENSION_ASSIGNEE_WIRE_VALUES,
    ExtensionAssignee,
    IVRRingType,
    PhoneAssignmentType,
)
from app.db.models import Account, LocationOnboarding, Phone, User
from app.schemas.provisioning import (
    AddressPayload,
    AssignedUserPayload,
    CallFlowPayload,
    ContactsPayload,
    DevicePayload,
    DirectRoutingPayload,
    ExtensionPayload,
    FaxPayload,
    IVROptionPayload,
    IVRPayload,
    LocationPayload,
    PayloadMetadata,
    PhoneSystemPayload,
    PrimaryContactPayload,
    ProvisioningPayload,
    RingTargetPayload,
    UserPayload,
    VoicemailPayload,
    WorkingHoursPayload,
)
from app.services import onboarding_store
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class ProvisioningNotFoundError(NotFoundError):
    pass


class GenerateAndValidateResult(TypedDict):
    payload: ProvisioningPayload
    valid: bool
    errors: list[str]


class PayloadValidationResult(TypedDict):
    valid: bool
    errors: list[str]


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def split_name(name: str) -> tuple[str, str]:
    parts = name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def extension_assignee(assignment_type: str) -> ExtensionAssignee:
    if assignment_type == PhoneAssignmentType.ASSIGNED_TO_USER.value:
        return ExtensionAssignee.USER
    if assignment_type == PhoneAssignmentType.ASSIGNED_TO_EXTENSION.value:
        return ExtensionAssignee.EXTENSION
    return ExtensionAssignee.SHARED


def _build_users(db: Session, phones: list[Phone]) -> dict[str, UserPayload]:
    """First user-assigned phone per user id wins; unknown user ids are skipped."""
    users: dict[str, UserPayload] = {}
    for phone in phones:
        if phone.assignment_type != PhoneAssignmentType.ASSIGNED_TO_USER.value:
            continue
        if not phone.assigned_user_id or phone.assigned_user_id in users:
            continue
        user = db.get(User, phone.assigned_user_id)
        if user is None:
            continue
        first_name, last_name = split_name(user.name)
        users[user.id] = UserPayload(
            first_name=first_name,
            last_name=last_name,
            email=user.email,
            extension=phone.extension,
        )
    return users


def _build_device(phone: Phone, users: dict[str, UserPayload]) -> DevicePayload:
    assigned_user = None
    user = users.get(phone.assigned_user_id) if phone.assigned_user_id else None
    if user is not None:
        assigned_user = AssignedUserPayload(
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )
    return DevicePayload(
        id=phone.id,
        brand=phone.brand,
        model=phone.model,
        ownership=phone.ownership,
        assignment_type=phone.assignment_type,
        mac_address=phone.mac_address or None,
        serial_number=phone.serial_number or None,
        extension=phone.extension or None,
        assigned_user=assigned_user,
    )


def _build_extensions(phones: list[Phone]) -> list[ExtensionPayload]:
    return [
        ExtensionPayload(
            extension=phone.extension,
            assigned_to=EXTENSION_ASSIGNEE_WIRE_VALUES[extension_assignee(phone.assignment_type)],
            user_id=phone.assigned_user_id,
            device_id=phone.id,
        )
        for phone in phones
        if phone.extension
    ]


def _build_working_hours(onboarding: LocationOnboarding) -> list[WorkingHoursPayload]:
    return [
        WorkingHoursPayload(
            day=entry.get("day_of_week"),
            is_open=bool(entry.get("is_open")),
            open_time=entry.get("open_time") if entry.get("is_open") else None,
            close_time=entry.get("close_time") if entry.get("is_open") else None,
        )
        for entry in onboarding.working_hours or []
    ]


def _ring_targets(targets: list[dict]) -> list[RingTargetPayload]:
    return [
        RingTargetPayload(user_id=t.get("user_id") or None, extension=t.get("extension") or None)
        for t in targets or []
    ]


def _build_ivr(onboarding: LocationOnboarding) -> IVRPayload:
    options = [
        IVROptionPayload(
            option_number=option.get("option_number") or "",
            script=option.get("label") or "",
            ring_type=option.get("ring_type") or IVRRingType.USERS.value,
            targets=_ring_targets(option.get("targets")),
            retry_attempts=onboarding.ivr_retry_attempts or 0,
            wait_time=onboarding.ivr_wait_time or 0,
            invalid_selection_script=onboarding.ivr_invalid_selection_script or None,
            after_retries_target=onboarding.ivr_after_retries_target or "",
            voicemail_script=onboarding.voicemail_script or None,
        )
        for option in onboarding.ivr_options or []
    ]
    return IVRPayload(script=onboarding.ivr_script or None, options=options)


def _build_direct_routing(onboarding: LocationOnboarding) -> DirectRoutingPayload | None:
    users = onboarding.direct_ring_users or []
    extensions = onboarding.direct_ring_extensions or []
    if not users and not extensions:
        return None
    targets = [RingTargetPayload(user_id=u) for u in users]
    targets += [RingTargetPayload(extension=e) for e in extensions]
    return DirectRoutingPayload(
        ring_type=IVRRingType.USERS.value if users else IVRRingType.EXTENSIONS.value,
        targets=targets,
    )


def _build_call_flow(onboarding: LocationOnboarding) -> CallFlowPayload:
    has_ivr = bool(onboarding.has_ivr)
    return CallFlowPayload(
        greeting_message=onboarding.greeting_message or None,
        has_ivr=has_ivr,
        ivr=_build_ivr(onboarding) if has_ivr else None,
        direct_routing=None if has_ivr else _build_direct_routing(onboarding),
        voicemail=VoicemailPayload(
            script=onboarding.voicemail_script or None,
            shared_users=list(onboarding.shared_voicemail_users or []),
        ),
    )


def generate(db: Session, location_id: str, now: datetime | None = None) -> ProvisioningPayload:
    """
    Build the provisioning payload for a location.

    Raises:
        ProvisioningNotFoundError: location, account or onboarding missing
    """
    location = onboarding_store.get_location(db, location_id)
    if location is None:
        raise ProvisioningNotFoundError(f"Location {location_id} not found")

    account = db.get(Account, location.account_id)
    if account is None:
        raise ProvisioningNotFoundError(f"Account {location.account_id} not found")

    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        raise ProvisioningNotFoundError(f"Onboarding not found for location {location_id}")

    phones = onboarding_store.get_phones(db, location_id)
    users = _build_users(db, phones)
    devices = [_build_device(phone, users) for phone in phones]
    extensions = _build_extensions(phones)

    generated_at = format_timestamp(now or utcnow())

    payload = ProvisioningPayload(
        location_id=location.id,
        location_name=location.name,
        account_id=account.id,
        account_name=account.name,
        timestamp=generated_at,
        version=settings.PROVISIONING_PAYLOAD_VERSION,
        location=LocationPayload(
            name=location.name,
            address=AddressPayload(
                line1=location.address_line1,
                line2=location.address_line2 or None,
                city=location.city,
                state=location.state,
                zipcode=location.zipcode,
            ),
        ),
        contacts=ContactsPayload(
            primary=PrimaryContactPayload(
                name=onboarding.poc_name or "",
                email=onboarding.poc_email or "",
                phone=onboarding.poc_phone or "",
                preferred_contact_medium=onboarding.preferred_contact_medium or None,
            )
        ),
        phone_system=PhoneSystemPayload(
            type=onboarding.phone_system_type or "",
            details=onboarding.phone_system_details or None,
            voip_provider=onboarding.phone_system_voip_type or None,
            call_forwarding_supported=onboarding.call_forwarding_supported,
            fax=FaxPayload(
                uses_fax=bool(onboarding.uses_fax),
                fax_number=onboarding.fax_number or None,
                wants_fax_in_voice_stack=onboarding.wants_fax_in_voicestack,
            ),
        ),
        devices=devices,
        users=list(users.values()),
        extensions=extensions,
        working_hours=_build_working_hours(onboarding),
        call_flow=_build_call_flow(onboarding),
        metadata=PayloadMetadata(
            practice_management_software=onboarding.practice_management_software or None,
            total_devices=len(phones),
            assignment_strategy=onboarding.assignment_strategy or None,
            submitted_at=format_timestamp(onboarding.submitted_at) if onboarding.submitted_at else None,
            generated_at=generated_at,
        ),
    )

    logger.info(
        "Provisioning payload generated",
        extra=build_log_context(
            location_id=location_id,
            account_id=account.id,
            action="GENERATE_PROVISIONING_PAYLOAD",
            device_count=len(devices),
            user_count=len(users),
            extension_count=len(extensions),
        ),
    )
    return payload


def validate(payload: ProvisioningPayload) -> PayloadValidationResult:
    """Structural completeness check before handing the payload off."""
    errors: list[str] = []

    if not payload.location.name:
        errors.append("Location name is required")
    if not payload.contacts.primary.email:
        errors.append("Primary contact email is required")
    if not payload.devices:
        errors.append("At least one device is required")
    if not payload.phone_system.type:
        errors.append("Phone system type is required")
    if payload.call_flow.has_ivr and payload.call_flow.ivr is None:
        errors.append("IVR configuration is missing")

    return PayloadValidationResult(valid=not errors, errors=errors)


def generate_and_validate(
    db: Session,
    location_id: str,
    now: datetime | None = None,
) -> GenerateAndValidateResult:
    payload = generate(db, location_id, now=now)
    validation = validate(payload)
    return GenerateAndValidateResult(
        payload=payload,
        valid=validation["valid"],
        errors=validation["errors"],
    )
