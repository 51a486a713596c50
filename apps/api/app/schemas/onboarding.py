"""Pydantic schemas for location onboarding data."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.db.enums import (
    ContactMedium,
    DayOfWeek,
    DeviceOwnership,
    DeviceType,
    IVRRingType,
    OnboardingStatus,
    PhoneAssignmentType,
    PhoneSystemType,
)
from app.utils.normalization import normalize_email, normalize_name


class IVROptionTarget(BaseModel):
    """Ring target for an IVR option: a user or an extension."""
    user_id: str | None = None
    extension: str | None = None


class IVROption(BaseModel):
    """One DTMF menu entry."""
    id: str | None = None
    option_number: str = ""  # DTMF digit, e.g. "1"
    label: str | None = None
    ring_type: IVRRingType = IVRRingType.USERS
    targets: list[IVROptionTarget] = Field(default_factory=list)


class DeviceCatalogSelection(BaseModel):
    """A handset picked from the VoiceStack catalog (purchase flow)."""
    # Missing brand/model is reported by the submission validator, not rejected here
    brand: str | None = None
    model: str | None = None
    quantity: int = 0
    device_types: list[DeviceType] = Field(default_factory=list)


class WorkingHoursEntry(BaseModel):
    """One shift. Several entries for the same day are separate shifts."""
    day_of_week: DayOfWeek
    is_open: bool = False
    open_time: str | None = Field(None, description="HH:mm, 24-hour")
    close_time: str | None = Field(None, description="HH:mm, 24-hour")


class OnboardingUpdate(BaseModel):
    """Partial update of a location's onboarding (shallow merge)."""
    # Basic details
    poc_name: str | None = Field(None, max_length=255)
    poc_contact: str | None = Field(None, max_length=255)
    poc_email: str | None = Field(None, max_length=255)
    poc_phone: str | None = Field(None, max_length=30)
    preferred_contact_medium: ContactMedium | None = None
    practice_management_software: str | None = Field(None, max_length=255)

    # Phone system
    phone_system_type: PhoneSystemType | None = None
    phone_system_details: str | None = None
    phone_system_voip_type: str | None = Field(None, max_length=100)
    call_forwarding_supported: bool | None = None
    uses_fax: bool | None = None
    fax_number: str | None = Field(None, max_length=30)
    wants_fax_in_voicestack: bool | None = None

    # Devices
    device_ownership: DeviceOwnership | None = None
    has_yealink_or_polycom: bool | None = None
    buy_phones_through_voicestack: bool | None = None
    device_catalog_selections: list[DeviceCatalogSelection] | None = None
    total_devices: int | None = Field(None, ge=0)
    assignment_strategy: PhoneAssignmentType | None = None

    # Working hours
    working_hours: list[WorkingHoursEntry] | None = None

    # Call flow
    greeting_message: str | None = None
    has_ivr: bool | None = None
    ivr_script: str | None = None
    ivr_retry_attempts: int | None = None
    ivr_wait_time: int | None = None
    ivr_invalid_selection_script: str | None = None
    ivr_after_retries_target: str | None = None
    ivr_options: list[IVROption] | None = None
    direct_ring_users: list[str] | None = None
    direct_ring_extensions: list[str] | None = None
    voicemail_script: str | None = None
    shared_voicemail_users: list[str] | None = None
    call_queue: dict | None = None

    @field_validator("poc_email", mode="before")
    @classmethod
    def normalize_email_field(cls, v: str | None) -> str | None:
        return normalize_email(v)

    @field_validator("poc_name", mode="before")
    @classmethod
    def normalize_name_field(cls, v: str | None) -> str | None:
        return normalize_name(v)

    @field_validator("assignment_strategy")
    @classmethod
    def _normalize_strategy(cls, value: PhoneAssignmentType | None) -> PhoneAssignmentType | None:
        return PhoneAssignmentType.normalize(value)


class OnboardingRead(BaseModel):
    """Full onboarding response."""
    id: str
    location_id: str
    status: OnboardingStatus

    poc_name: str | None = None
    poc_contact: str | None = None
    poc_email: str | None = None
    poc_phone: str | None = None
    preferred_contact_medium: str | None = None
    practice_management_software: str | None = None

    phone_system_type: str | None = None
    phone_system_details: str | None = None
    phone_system_voip_type: str | None = None
    call_forwarding_supported: bool | None = None
    uses_fax: bool | None = None
    fax_number: str | None = None
    wants_fax_in_voicestack: bool | None = None

    device_ownership: str | None = None
    has_yealink_or_polycom: bool | None = None
    buy_phones_through_voicestack: bool | None = None
    device_catalog_selections: list[DeviceCatalogSelection] | None = None
    total_devices: int | None = None
    assignment_strategy: str | None = None

    working_hours: list[WorkingHoursEntry] | None = None

    greeting_message: str | None = None
    has_ivr: bool | None = None
    ivr_script: str | None = None
    ivr_retry_attempts: int | None = None
    ivr_wait_time: int | None = None
    ivr_invalid_selection_script: str | None = None
    ivr_after_retries_target: str | None = None
    ivr_options: list[IVROption] | None = None
    direct_ring_users: list[str] | None = None
    direct_ring_extensions: list[str] | None = None
    voicemail_script: str | None = None
    shared_voicemail_users: list[str] | None = None
    call_queue: dict | None = None

    copied_from_location_id: str | None = None
    created_at: datetime
    updated_at: datetime
    submitted_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}


class OnboardingUpdateResponse(BaseModel):
    """Update result; requires_override is set when a lead edited a locked record."""
    onboarding: OnboardingRead
    requires_override: bool = False


class CopyLocationRequest(BaseModel):
    """Copy contact fields from another location of the same account."""
    from_location_id: str
    fields_to_copy: list[str] = Field(..., min_length=1)


class SourceLocationItem(BaseModel):
    id: str
    name: str
    has_onboarding: bool
