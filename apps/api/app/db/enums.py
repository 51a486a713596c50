"""Enum definitions for application constants.

Values are the wire spellings shared with the wizard UI and the
provisioning contract, so they are upper-case unless the contract says
otherwise (IVR ring types, extension assignees).
"""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    - IMPLEMENTATION_LEAD: administers accounts, approves exceptions,
      may override locked onboarding
    - CUSTOMER: fills out the onboarding wizard for their locations
    """
    IMPLEMENTATION_LEAD = "IMPLEMENTATION_LEAD"
    CUSTOMER = "CUSTOMER"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class ProductType(str, Enum):
    CS_VOICESTACK = "CS_VOICESTACK"
    VOICESTACK = "VOICESTACK"


class OnboardingStatus(str, Enum):
    """
    Onboarding lifecycle.

        NOT_STARTED → IN_PROGRESS → PENDING_APPROVAL → APPROVED/PROVISIONING → COMPLETED

    BLOCKED and CANCELLED are side states. APPROVED, PROVISIONING and
    COMPLETED lock the onboarding against further edits.
    """
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PROVISIONING = "PROVISIONING"
    COMPLETED = "COMPLETED"
    BLOCKED = "BLOCKED"
    CANCELLED = "CANCELLED"


class OnboardingStep(str, Enum):
    """Wizard steps, declared in their strict order."""
    BASIC_DETAILS = "BASIC_DETAILS"
    PHONE_SYSTEM = "PHONE_SYSTEM"
    DEVICES = "DEVICES"
    WORKING_HOURS = "WORKING_HOURS"
    CALL_FLOW = "CALL_FLOW"
    CALL_QUEUE = "CALL_QUEUE"
    USERS = "USERS"
    REVIEW = "REVIEW"


class PhoneSystemType(str, Enum):
    TRADITIONAL = "TRADITIONAL"
    VOIP = "VOIP"


class PhoneBrand(str, Enum):
    YEALINK = "YEALINK"
    POLYCOM = "POLYCOM"
    OTHER = "OTHER"


class DeviceType(str, Enum):
    DESKPHONE = "DESKPHONE"
    SOFTPHONE = "SOFTPHONE"
    MOBILE = "MOBILE"


class DeviceOwnership(str, Enum):
    """Location-level answer: does the customer already own handsets?"""
    OWNED = "OWNED"
    NOT_OWNED = "NOT_OWNED"


class PhoneOwnership(str, Enum):
    """Per-device ownership."""
    OWNED = "OWNED"
    LEASED = "LEASED"


class PhoneAssignmentType(str, Enum):
    ASSIGNED_TO_USER = "ASSIGNED_TO_USER"
    ASSIGNED_TO_EXTENSION = "ASSIGNED_TO_EXTENSION"
    COMMON = "COMMON"  # Legacy, normalized to ASSIGNED_TO_EXTENSION on write

    @classmethod
    def normalize(cls, value: "PhoneAssignmentType | str | None") -> "PhoneAssignmentType | None":
        """Map legacy COMMON onto ASSIGNED_TO_EXTENSION."""
        if value is None:
            return None
        value = cls(value)
        if value == cls.COMMON:
            return cls.ASSIGNED_TO_EXTENSION
        return value

    @property
    def targets_extension(self) -> bool:
        return self in (PhoneAssignmentType.ASSIGNED_TO_EXTENSION, PhoneAssignmentType.COMMON)


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class ContactMedium(str, Enum):
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    SMS = "SMS"
    PREFERRED_EMAIL = "PREFERRED_EMAIL"
    PREFERRED_PHONE = "PREFERRED_PHONE"


class IVRRingType(str, Enum):
    USERS = "users"
    EXTENSIONS = "extensions"


class ApprovalType(str, Enum):
    PHONE_PURCHASE = "PHONE_PURCHASE"
    CREDIT_APPROVAL = "CREDIT_APPROVAL"
    PROVISIONING = "PROVISIONING"


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ExtensionAssignee(str, Enum):
    """
    Who an extension belongs to in the provisioning payload.

    Internal names are descriptive; the wire spelling is fixed by the
    provisioning contract (see EXTENSION_ASSIGNEE_WIRE_VALUES).
    """
    USER = "USER"
    EXTENSION = "EXTENSION"
    SHARED = "SHARED"


# Provisioning contract spellings. "device" means "assigned to an extension".
EXTENSION_ASSIGNEE_WIRE_VALUES: dict[ExtensionAssignee, str] = {
    ExtensionAssignee.USER: "user",
    ExtensionAssignee.EXTENSION: "device",
    ExtensionAssignee.SHARED: "common",
}
