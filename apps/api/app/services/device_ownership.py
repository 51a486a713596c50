"""Device ownership decision for a location.

The devices step asks up to three questions (do you own phones, are they
Yealink/Polycom, will you buy through VoiceStack). ``resolve_device_ownership``
folds the three nullable answers into one variant so callers can branch on
the outcome instead of re-deriving it.

    OWNED + Yealink/Polycom              -> ManualEntry(owned_supported=True)
    OWNED + other brand    ┐
    NOT_OWNED              ┴ buy=True    -> CatalogPurchase
                             buy=False   -> ManualEntry(owned_supported=False)
                             buy=None    -> PurchaseUndecided
    OWNED + brand unanswered             -> BrandQuestionUnanswered
    ownership unanswered                 -> OwnershipUnanswered
"""

from dataclasses import dataclass, field
from typing import Any, Union

from app.db.enums import DeviceOwnership
from app.db.models import LocationOnboarding


@dataclass(frozen=True)
class OwnershipUnanswered:
    """No ownership answer; only the legacy ``total_devices`` field may say anything."""
    total_devices: int | None = None


@dataclass(frozen=True)
class BrandQuestionUnanswered:
    """Owns phones but has not said whether they are Yealink/Polycom."""


@dataclass(frozen=True)
class PurchaseUndecided:
    """Needs phones (none owned, or unsupported brand) but has not chosen how to get them."""
    ownership: DeviceOwnership


@dataclass(frozen=True)
class CatalogPurchase:
    """Buying through the VoiceStack catalog."""
    ownership: DeviceOwnership
    selections: tuple[dict[str, Any], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ManualEntry:
    """Phones are entered one by one as Phone records."""
    owned_supported: bool


DeviceOwnershipDecision = Union[
    OwnershipUnanswered,
    BrandQuestionUnanswered,
    PurchaseUndecided,
    CatalogPurchase,
    ManualEntry,
]


def _purchase_branch(ownership: DeviceOwnership, onboarding: LocationOnboarding) -> DeviceOwnershipDecision:
    buy = onboarding.buy_phones_through_voicestack
    if buy is None:
        return PurchaseUndecided(ownership=ownership)
    if buy:
        return CatalogPurchase(
            ownership=ownership,
            selections=tuple(onboarding.device_catalog_selections or ()),
        )
    return ManualEntry(owned_supported=False)


def resolve_device_ownership(onboarding: LocationOnboarding) -> DeviceOwnershipDecision:
    """Fold the devices-step answers into a single decision."""
    if onboarding.device_ownership is None:
        return OwnershipUnanswered(total_devices=onboarding.total_devices)

    ownership = DeviceOwnership(onboarding.device_ownership)
    if ownership == DeviceOwnership.NOT_OWNED:
        return _purchase_branch(ownership, onboarding)

    if onboarding.has_yealink_or_polycom is None:
        return BrandQuestionUnanswered()
    if onboarding.has_yealink_or_polycom:
        return ManualEntry(owned_supported=True)
    return _purchase_branch(ownership, onboarding)


def is_missing_devices(decision: DeviceOwnershipDecision, phone_count: int) -> bool:
    """Dashboard "missing devices" flag for a decision and the number of Phone records."""
    if isinstance(decision, OwnershipUnanswered):
        # Legacy records: only an explicit zero (or no count at all) with no phones
        return decision.total_devices in (None, 0) and phone_count == 0
    if isinstance(decision, (BrandQuestionUnanswered, PurchaseUndecided)):
        return False
    if isinstance(decision, CatalogPurchase):
        return len(decision.selections) == 0
    if isinstance(decision, ManualEntry):
        return phone_count == 0
    raise TypeError(f"Unknown device ownership decision: {decision!r}")
