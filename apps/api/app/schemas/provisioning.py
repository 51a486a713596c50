"""Provisioning payload contract.

Field names are snake_case in Python and camelCase on the wire. Dump with
``to_wire()`` so aliases are applied and unset optional keys are omitted.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AddressPayload(PayloadModel):
    line1: str
    line2: str | None = None
    city: str
    state: str
    zipcode: str


class LocationPayload(PayloadModel):
    name: str
    address: AddressPayload


class PrimaryContactPayload(PayloadModel):
    name: str
    email: str
    phone: str
    preferred_contact_medium: str | None = None


class ContactsPayload(PayloadModel):
    primary: PrimaryContactPayload


class FaxPayload(PayloadModel):
    uses_fax: bool
    fax_number: str | None = None
    wants_fax_in_voice_stack: bool | None = None


class PhoneSystemPayload(PayloadModel):
    type: str
    details: str | None = None
    voip_provider: str | None = None
    call_forwarding_supported: bool | None = None
    fax: FaxPayload


class AssignedUserPayload(PayloadModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class DevicePayload(PayloadModel):
    id: str
    brand: str
    model: str
    ownership: Literal["OWNED", "LEASED"]
    assignment_type: str
    mac_address: str | None = None
    serial_number: str | None = None
    extension: str | None = None
    assigned_user: AssignedUserPayload | None = None


class UserPayload(PayloadModel):
    first_name: str
    last_name: str
    email: str
    extension: str | None = None


class ExtensionPayload(PayloadModel):
    extension: str
    assigned_to: Literal["user", "device", "common"]
    user_id: str | None = None
    device_id: str | None = None


class WorkingHoursPayload(PayloadModel):
    day: str
    is_open: bool
    open_time: str | None = None
    close_time: str | None = None


class RingTargetPayload(PayloadModel):
    user_id: str | None = None
    extension: str | None = None


class IVROptionPayload(PayloadModel):
    option_number: str
    script: str
    ring_type: Literal["users", "extensions"]
    targets: list[RingTargetPayload] = Field(default_factory=list)
    # Menu-wide settings, repeated on each option for the provisioning system
    retry_attempts: int
    wait_time: int
    invalid_selection_script: str | None = None
    after_retries_target: str
    voicemail_script: str | None = None


class IVRPayload(PayloadModel):
    script: str | None = None
    options: list[IVROptionPayload] = Field(default_factory=list)


class DirectRoutingPayload(PayloadModel):
    ring_type: Literal["users", "extensions"]
    targets: list[RingTargetPayload] = Field(default_factory=list)


class VoicemailPayload(PayloadModel):
    script: str | None = None
    shared_users: list[str] = Field(default_factory=list)


class CallFlowPayload(PayloadModel):
    greeting_message: str | None = None
    has_ivr: bool = Field(alias="hasIVR")
    ivr: IVRPayload | None = None
    direct_routing: DirectRoutingPayload | None = None
    voicemail: VoicemailPayload


class PayloadMetadata(PayloadModel):
    practice_management_software: str | None = None
    total_devices: int
    assignment_strategy: str | None = None
    submitted_at: str | None = None
    generated_at: str


class ProvisioningPayload(PayloadModel):
    """Versioned payload handed to the downstream provisioning system."""
    location_id: str
    location_name: str
    account_id: str
    account_name: str
    timestamp: str
    version: str

    location: LocationPayload
    contacts: ContactsPayload
    phone_system: PhoneSystemPayload
    devices: list[DevicePayload] = Field(default_factory=list)
    users: list[UserPayload] = Field(default_factory=list)
    extensions: list[ExtensionPayload] = Field(default_factory=list)
    working_hours: list[WorkingHoursPayload] = Field(default_factory=list)
    call_flow: CallFlowPayload
    metadata: PayloadMetadata


class PayloadValidation(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ProvisioningResponse(BaseModel):
    """Router response: the wire payload plus its structural validation."""
    payload: dict[str, Any]
    valid: bool
    errors: list[str] = Field(default_factory=list)
