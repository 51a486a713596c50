"""Validation result schemas shared by the device and onboarding validators."""

from pydantic import BaseModel, Field

from app.db.enums import PhoneBrand


class ValidationResultRead(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class DeviceValidationRequest(BaseModel):
    brand: str = ""
    model: str = ""


class DeviceValidationRead(BaseModel):
    is_valid: bool
    is_supported: bool
    brand: str
    model: str
    message: str | None = None


class SupportedModelRead(BaseModel):
    brand: PhoneBrand
    model: str
    description: str
