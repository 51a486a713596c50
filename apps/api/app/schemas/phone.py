"""Pydantic schemas for phones (devices)."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.db.enums import DeviceType, PhoneAssignmentType, PhoneBrand, PhoneOwnership
from app.utils.normalization import normalize_extension, normalize_mac_address


class PhoneCreate(BaseModel):
    """Request to add a device to a location."""
    brand: PhoneBrand
    model: str = Field(..., min_length=1, max_length=100)  # Free text when brand is OTHER
    ownership: PhoneOwnership = PhoneOwnership.OWNED
    assignment_type: PhoneAssignmentType
    assigned_user_id: str | None = None
    mac_address: str | None = Field(None, max_length=32)
    serial_number: str | None = Field(None, max_length=64)
    extension: str | None = Field(None, max_length=20)
    enable_user_detection: bool = False
    device_types: list[DeviceType] = Field(default_factory=list)

    @field_validator("assignment_type")
    @classmethod
    def _normalize_assignment(cls, value: PhoneAssignmentType) -> PhoneAssignmentType:
        return PhoneAssignmentType.normalize(value)

    @field_validator("mac_address", mode="before")
    @classmethod
    def normalize_mac_field(cls, v: str | None) -> str | None:
        return normalize_mac_address(v)  # Raises ValueError on invalid

    @field_validator("extension", mode="before")
    @classmethod
    def normalize_extension_field(cls, v: str | None) -> str | None:
        return normalize_extension(v)


class PhoneUpdate(BaseModel):
    """Request to update a device (partial)."""
    brand: PhoneBrand | None = None
    model: str | None = Field(None, min_length=1, max_length=100)
    ownership: PhoneOwnership | None = None
    assignment_type: PhoneAssignmentType | None = None
    assigned_user_id: str | None = None
    mac_address: str | None = Field(None, max_length=32)
    serial_number: str | None = Field(None, max_length=64)
    extension: str | None = Field(None, max_length=20)
    enable_user_detection: bool | None = None
    device_types: list[DeviceType] | None = None

    @field_validator("assignment_type")
    @classmethod
    def _normalize_assignment(cls, value: PhoneAssignmentType | None) -> PhoneAssignmentType | None:
        return PhoneAssignmentType.normalize(value)

    @field_validator("mac_address", mode="before")
    @classmethod
    def normalize_mac_field(cls, v: str | None) -> str | None:
        return normalize_mac_address(v)

    @field_validator("extension", mode="before")
    @classmethod
    def normalize_extension_field(cls, v: str | None) -> str | None:
        return normalize_extension(v)


class PhoneRead(BaseModel):
    """Full device response, including derived support/warning flags."""
    id: str
    location_id: str
    brand: str
    model: str
    ownership: str
    assignment_type: str
    assigned_user_id: str | None
    mac_address: str | None
    serial_number: str | None
    extension: str | None
    enable_user_detection: bool
    device_types: list[str]
    is_unsupported: bool
    has_warnings: bool
    warning_reason: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PhoneWriteResponse(BaseModel):
    """Device write result; approval_id is set when an unsupported device opened an approval."""
    phone: PhoneRead
    requires_approval: bool
    approval_id: str | None = None
