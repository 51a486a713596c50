"""SQLAlchemy ORM models for accounts, locations and onboarding."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON, Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin, utcnow
from app.db.enums import (
    ApprovalStatus, OnboardingStatus, OnboardingStep, PhoneOwnership, ProductType, Role
)


def _uuid_str() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Tenant Models
# =============================================================================

class Account(TimestampMixin, Base):
    """
    A customer business (tenant) buying VoiceStack.

    All locations belong to exactly one account; account dashboards roll up
    warnings across those locations.
    """
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_type: Mapped[str] = mapped_column(
        String(30), default=ProductType.VOICESTACK.value, nullable=False
    )
    # CS VoiceStack accounts carry the id of the upstream billing account
    external_account_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    locations: Mapped[list["Location"]] = relationship(
        back_populates="account", order_by="Location.created_at"
    )


class User(TimestampMixin, Base):
    """A person: implementation lead, customer contact, or device assignee."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(30), default=Role.CUSTOMER.value, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    account_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )


class Location(TimestampMixin, Base):
    """A physical site being onboarded."""
    __tablename__ = "locations"
    __table_args__ = (Index("idx_locations_account", "account_id"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    customer_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    address_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    zipcode: Mapped[str] = mapped_column(String(20), nullable=False)

    account: Mapped[Account] = relationship(back_populates="locations")


# =============================================================================
# Onboarding Models
# =============================================================================

class LocationOnboarding(TimestampMixin, Base):
    """
    The questionnaire record for one location.

    Created lazily on first write (id ``onboarding-<location_id>``) and never
    hard-deleted. Tri-state booleans matter: ``None`` means "not answered yet"
    and is treated differently from an explicit ``False`` throughout the
    validation and skip rules.
    """
    __tablename__ = "location_onboardings"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    location_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(30), default=OnboardingStatus.NOT_STARTED.value, nullable=False
    )

    # Basic details
    poc_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    poc_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    poc_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    poc_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    preferred_contact_medium: Mapped[str | None] = mapped_column(String(30), nullable=True)
    practice_management_software: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Existing phone system
    phone_system_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    phone_system_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_system_voip_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    call_forwarding_supported: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    uses_fax: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    fax_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    wants_fax_in_voicestack: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Device ownership & purchase flow
    device_ownership: Mapped[str | None] = mapped_column(String(20), nullable=True)
    has_yealink_or_polycom: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    buy_phones_through_voicestack: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    # [{brand, model, quantity, device_types}]
    device_catalog_selections: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    # Legacy device fields
    total_devices: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assignment_strategy: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Working hours: [{day_of_week, is_open, open_time, close_time}], one entry per shift
    working_hours: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    # Call flow
    greeting_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_ivr: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    ivr_script: Mapped[str | None] = mapped_column(Text, nullable=True)
    ivr_retry_attempts: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ivr_wait_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ivr_invalid_selection_script: Mapped[str | None] = mapped_column(Text, nullable=True)
    ivr_after_retries_target: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # [{id, option_number, label, ring_type, targets: [{user_id, extension}]}]
    ivr_options: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    direct_ring_users: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    direct_ring_extensions: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    voicemail_script: Mapped[str | None] = mapped_column(Text, nullable=True)
    shared_voicemail_users: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    # Call queue (free-form until the queue step is modelled)
    call_queue: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Provenance
    copied_from_location_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)


class Phone(TimestampMixin, Base):
    """
    A handset at a location.

    ``is_unsupported``, ``has_warnings`` and ``warning_reason`` are derived by
    the device validation service on every write; client input never sets them.
    """
    __tablename__ = "phones"
    __table_args__ = (
        # One extension per location; NULL extensions do not collide
        UniqueConstraint("location_id", "extension", name="uq_phones_location_extension"),
        Index("idx_phones_location", "location_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    location_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    brand: Mapped[str] = mapped_column(String(30), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    ownership: Mapped[str] = mapped_column(
        String(20), default=PhoneOwnership.OWNED.value, nullable=False
    )
    assignment_type: Mapped[str] = mapped_column(String(30), nullable=False)
    assigned_user_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    mac_address: Mapped[str | None] = mapped_column(String(32), nullable=True)
    serial_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    extension: Mapped[str | None] = mapped_column(String(20), nullable=True)
    enable_user_detection: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    device_types: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Derived
    is_unsupported: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_warnings: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    warning_reason: Mapped[str | None] = mapped_column(Text, nullable=True)


class OnboardingSession(TimestampMixin, Base):
    """
    Wizard progress for one location.

    A projection of the onboarding data, not the source of truth: when
    absent it is rebuilt from field presence.
    """
    __tablename__ = "onboarding_sessions"

    location_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="CASCADE"), primary_key=True
    )
    current_step: Mapped[str] = mapped_column(
        String(30), default=OnboardingStep.BASIC_DETAILS.value, nullable=False
    )
    completed_steps: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(
        String(30), default=OnboardingStatus.NOT_STARTED.value, nullable=False
    )
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def id(self) -> str:
        return f"session-{self.location_id}"


class ApprovalRequest(Base):
    """An exception awaiting an implementation lead (e.g. unsupported phone purchase)."""
    __tablename__ = "approval_requests"
    __table_args__ = (
        Index("idx_approval_requests_location_status", "location_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    location_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)  # Phone id, account id, ...
    status: Mapped[str] = mapped_column(
        String(20), default=ApprovalStatus.PENDING.value, nullable=False
    )
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    requested_by: Mapped[str] = mapped_column(String(64), nullable=False)
    requested_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    resolved_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)


class ExtensionSeries(TimestampMixin, Base):
    """Numeric extension range and reservations for one location."""
    __tablename__ = "extension_series"

    location_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="CASCADE"), primary_key=True
    )
    prefix: Mapped[str | None] = mapped_column(String(10), nullable=True)
    start_range: Mapped[int] = mapped_column(Integer, nullable=False)
    end_range: Mapped[int] = mapped_column(Integer, nullable=False)
    reserved_extensions: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
