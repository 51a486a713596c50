"""Smart-skip rules: questions the wizard can hide because the answer is known."""

from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.master_data import get_phone_system_knowledge
from app.db.enums import PhoneAssignmentType, PhoneSystemType
from app.db.models import LocationOnboarding, Phone
from app.services import onboarding_store

IVR_FIELDS: tuple[str, ...] = (
    "ivrOptions",
    "ivrScript",
    "ivrRetryAttempts",
    "ivrWaitTime",
    "ivrInvalidSelectionScript",
    "ivrAfterRetriesTarget",
)


class SkipRule(TypedDict):
    field: str
    should_skip: bool
    reason: str


def get_call_forwarding_support(
    phone_system_type: PhoneSystemType | str | None,
    phone_system_name: str | None,
) -> bool | None:
    """Known call-forwarding support for a phone system, or None if unknown."""
    knowledge = get_phone_system_knowledge(phone_system_type, phone_system_name)
    if knowledge is None:
        return None
    return knowledge.supports_call_forwarding


def should_skip_call_forwarding_question(
    phone_system_type: PhoneSystemType | str | None,
    phone_system_name: str | None,
) -> bool:
    return get_call_forwarding_support(phone_system_type, phone_system_name) is not None


def should_skip_ivr_questions(has_ivr: bool | None) -> bool:
    # Only an explicit "no"; unanswered keeps the questions visible
    return has_ivr is False


def should_ask_voicestack_fax(uses_fax: bool | None) -> bool:
    return uses_fax is False


def build_skip_rules(onboarding: LocationOnboarding, phones: list[Phone]) -> list[SkipRule]:
    """Skip rules for an onboarding snapshot and its phones."""
    rules: list[SkipRule] = []

    if should_skip_call_forwarding_question(
        onboarding.phone_system_type, onboarding.phone_system_voip_type
    ):
        rules.append(
            SkipRule(
                field="callForwardingSupported",
                should_skip=True,
                reason="Call forwarding support is known for this phone system",
            )
        )

    if should_skip_ivr_questions(onboarding.has_ivr):
        for field in IVR_FIELDS:
            rules.append(SkipRule(field=field, should_skip=True, reason="IVR is disabled"))

    if not should_ask_voicestack_fax(onboarding.uses_fax):
        reason = (
            "Customer already uses fax"
            if onboarding.uses_fax
            else "Fax usage has not been answered yet"
        )
        rules.append(SkipRule(field="wantsFaxInVoiceStack", should_skip=True, reason=reason))

    extension_phones = [
        phone for phone in phones
        if PhoneAssignmentType(phone.assignment_type).targets_extension
    ]
    if extension_phones:
        rules.append(
            SkipRule(
                field="deviceUserDetails",
                should_skip=True,
                reason=(
                    f"User details not required for {len(extension_phones)} "
                    "common/extension-assigned device(s)"
                ),
            )
        )

    return rules


def get_skip_rules(db: Session, location_id: str) -> list[SkipRule]:
    """Skip rules for a location; empty when nothing has been answered yet."""
    onboarding = onboarding_store.get_onboarding(db, location_id)
    if onboarding is None:
        return []
    return build_skip_rules(onboarding, onboarding_store.get_phones(db, location_id))
