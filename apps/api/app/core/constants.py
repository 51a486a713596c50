"""Application constants."""

from app.db.enums import OnboardingStatus, OnboardingStep

# Actor recorded for automated actions (device validation, automation hooks)
SYSTEM_ACTOR_ID = "system"

# Wizard step order (strict)
STEP_ORDER: list[OnboardingStep] = [
    OnboardingStep.BASIC_DETAILS,
    OnboardingStep.PHONE_SYSTEM,
    OnboardingStep.DEVICES,
    OnboardingStep.WORKING_HOURS,
    OnboardingStep.CALL_FLOW,
    OnboardingStep.CALL_QUEUE,
    OnboardingStep.USERS,
    OnboardingStep.REVIEW,
]

# Steps that must be complete before submission (everything but REVIEW)
REQUIRED_SUBMISSION_STEPS: list[OnboardingStep] = STEP_ORDER[: STEP_ORDER.index(OnboardingStep.USERS) + 1]

LOCKED_STATUSES: frozenset[OnboardingStatus] = frozenset(
    {
        OnboardingStatus.APPROVED,
        OnboardingStatus.PROVISIONING,
        OnboardingStatus.COMPLETED,
    }
)

EDITABLE_STATUSES: frozenset[OnboardingStatus] = frozenset(
    {
        OnboardingStatus.NOT_STARTED,
        OnboardingStatus.IN_PROGRESS,
        OnboardingStatus.BLOCKED,
    }
)

# Extension candidates are zero-padded to this width when a prefix is set
EXTENSION_PAD_WIDTH = 3

# Onboarding fields that may be copied from another location of the same account
COPYABLE_FIELDS: tuple[str, ...] = (
    "poc_name",
    "poc_contact",
    "poc_email",
    "poc_phone",
    "preferred_contact_medium",
)
