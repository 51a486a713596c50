"""Data normalization utilities for onboarding input."""

import re
from typing import Optional

MAC_HEX_PATTERN = re.compile(r"^[0-9A-F]{12}$")


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize email to lowercase.

    Args:
        email: Raw email input

    Returns:
        Lowercased email or None if empty
    """
    if not email or not email.strip():
        return None
    return email.strip().lower()


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize name by stripping whitespace and collapsing multiple spaces.

    Args:
        name: Raw name input

    Returns:
        Cleaned name or None if empty
    """
    if not name:
        return None
    cleaned = " ".join(name.split())
    return cleaned or None


def normalize_mac_address(mac: Optional[str]) -> Optional[str]:
    """
    Normalize a MAC address to upper-case colon-separated form (AA:BB:CC:DD:EE:FF).

    Accepts colons, dashes, dots or no separators.

    Raises:
        ValueError: If the input is not 12 hex digits
    """
    if not mac or not mac.strip():
        return None
    hex_digits = re.sub(r"[\s:\-.]", "", mac).upper()
    if not MAC_HEX_PATTERN.match(hex_digits):
        raise ValueError(f"Invalid MAC address '{mac}'. Use 12 hex digits (e.g., 00:15:65:AA:BB:CC).")
    return ":".join(hex_digits[i : i + 2] for i in range(0, 12, 2))


def normalize_extension(extension: Optional[str]) -> Optional[str]:
    """Strip whitespace from an extension; blank becomes None."""
    if extension is None:
        return None
    cleaned = extension.strip()
    return cleaned or None
