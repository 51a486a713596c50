"""Static master data: supported handsets and known phone-system capabilities."""

from __future__ import annotations

from dataclasses import dataclass

from app.db.enums import PhoneBrand, PhoneSystemType


@dataclass(frozen=True)
class SupportedPhoneModel:
    """A handset model VoiceStack can provision."""

    brand: PhoneBrand
    model: str
    description: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class PhoneSystemKnowledge:
    """What we already know about a customer's existing phone system."""

    phone_system_type: PhoneSystemType
    phone_system_name: str
    details: str = ""
    supports_call_forwarding: bool | None = None
    notes: str = ""


# Brands with a curated model allow-list. Every other brand is unsupported.
SUPPORTED_BRANDS: frozenset[PhoneBrand] = frozenset({PhoneBrand.YEALINK, PhoneBrand.POLYCOM})

SUPPORTED_PHONE_MODELS: tuple[SupportedPhoneModel, ...] = (
    # Yealink
    SupportedPhoneModel(PhoneBrand.YEALINK, "T46S", "12-line IP phone with color display"),
    SupportedPhoneModel(PhoneBrand.YEALINK, "T48S", "16-line IP phone with color display"),
    SupportedPhoneModel(PhoneBrand.YEALINK, "T54W", "12-line WiFi IP phone"),
    SupportedPhoneModel(PhoneBrand.YEALINK, "T57W", "16-line WiFi IP phone"),
    # Polycom
    SupportedPhoneModel(PhoneBrand.POLYCOM, "VVX 350", "12-line business media phone"),
    SupportedPhoneModel(PhoneBrand.POLYCOM, "VVX 450", "16-line business media phone"),
    SupportedPhoneModel(PhoneBrand.POLYCOM, "VVX 601", "24-line business media phone"),
)

PHONE_SYSTEM_KNOWLEDGE: tuple[PhoneSystemKnowledge, ...] = (
    PhoneSystemKnowledge(
        PhoneSystemType.VOIP,
        "RingCentral",
        "Cloud-based VoIP platform",
        True,
        "Full call forwarding support including conditional forwarding",
    ),
    PhoneSystemKnowledge(
        PhoneSystemType.VOIP,
        "8x8",
        "Cloud-based unified communications",
        True,
        "Supports call forwarding and voicemail forwarding",
    ),
    PhoneSystemKnowledge(
        PhoneSystemType.VOIP,
        "Nextiva",
        "Business VoIP solution",
        True,
        "Full call forwarding capabilities",
    ),
    PhoneSystemKnowledge(
        PhoneSystemType.TRADITIONAL,
        "Avaya IP Office",
        "On-premise IP PBX system",
        True,
        "Supports call forwarding with proper configuration",
    ),
    PhoneSystemKnowledge(
        PhoneSystemType.TRADITIONAL,
        "Cisco CallManager",
        "Enterprise IP telephony system",
        True,
        "Full call forwarding support",
    ),
    PhoneSystemKnowledge(
        PhoneSystemType.TRADITIONAL,
        "Panasonic KX-TDE",
        "Traditional PBX system",
        False,
        "Limited call forwarding capabilities",
    ),
)


def get_supported_phone_models(brand: PhoneBrand | str | None = None) -> list[SupportedPhoneModel]:
    """Active supported models, optionally for one brand."""
    return [
        m
        for m in SUPPORTED_PHONE_MODELS
        if m.is_active and (brand is None or m.brand == brand)
    ]


def is_phone_model_supported(brand: PhoneBrand | str | None, model: str | None) -> bool:
    """Exact, case-sensitive model match within a supported brand."""
    try:
        brand = PhoneBrand(brand)
    except ValueError:
        return False
    if brand not in SUPPORTED_BRANDS:
        return False
    return any(m.model == model for m in get_supported_phone_models(brand))


def get_phone_system_knowledge(
    phone_system_type: PhoneSystemType | str | None,
    phone_system_name: str | None,
) -> PhoneSystemKnowledge | None:
    """Look up a phone system by type and case-insensitive name."""
    if not phone_system_type or not phone_system_name:
        return None
    name = phone_system_name.strip().lower()
    for knowledge in PHONE_SYSTEM_KNOWLEDGE:
        if knowledge.phone_system_type == phone_system_type and knowledge.phone_system_name.lower() == name:
            return knowledge
    return None
