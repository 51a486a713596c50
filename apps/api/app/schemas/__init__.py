"""Pydantic schemas for API request/response models."""

from app.schemas.approval import ApprovalCreate, ApprovalRead, ApprovalResolve
from app.schemas.extension import (
    ExtensionAllocate,
    ExtensionAvailability,
    ExtensionList,
    ExtensionReserve,
    ExtensionSeriesCreate,
    ExtensionSeriesRead,
)
from app.schemas.onboarding import (
    CopyLocationRequest,
    DeviceCatalogSelection,
    IVROption,
    IVROptionTarget,
    OnboardingRead,
    OnboardingUpdate,
    OnboardingUpdateResponse,
    SourceLocationItem,
    WorkingHoursEntry,
)
from app.schemas.phone import PhoneCreate, PhoneRead, PhoneUpdate, PhoneWriteResponse
from app.schemas.provisioning import ProvisioningPayload, ProvisioningResponse
from app.schemas.session import (
    CanSubmitRead,
    ProgressRead,
    SessionRead,
    SkipRuleRead,
    StatusUpdate,
    StepUpdate,
    SubmitResponse,
)
from app.schemas.validation import (
    DeviceValidationRead,
    DeviceValidationRequest,
    SupportedModelRead,
    ValidationResultRead,
)
from app.schemas.warnings import AccountWarningsRead, LocationWarningsRead

__all__ = [
    # Approvals
    "ApprovalCreate",
    "ApprovalRead",
    "ApprovalResolve",
    # Extensions
    "ExtensionAllocate",
    "ExtensionAvailability",
    "ExtensionList",
    "ExtensionReserve",
    "ExtensionSeriesCreate",
    "ExtensionSeriesRead",
    # Onboarding
    "CopyLocationRequest",
    "DeviceCatalogSelection",
    "IVROption",
    "IVROptionTarget",
    "OnboardingRead",
    "OnboardingUpdate",
    "OnboardingUpdateResponse",
    "SourceLocationItem",
    "WorkingHoursEntry",
    # Phones
    "PhoneCreate",
    "PhoneRead",
    "PhoneUpdate",
    "PhoneWriteResponse",
    # Provisioning
    "ProvisioningPayload",
    "ProvisioningResponse",
    # Session
    "CanSubmitRead",
    "ProgressRead",
    "SessionRead",
    "SkipRuleRead",
    "StatusUpdate",
    "StepUpdate",
    "SubmitResponse",
    # Validation
    "DeviceValidationRead",
    "DeviceValidationRequest",
    "SupportedModelRead",
    "ValidationResultRead",
    # Warnings
    "AccountWarningsRead",
    "LocationWarningsRead",
]
