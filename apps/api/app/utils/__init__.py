"""Utility modules."""

from app.utils.normalization import (
    normalize_email,
    normalize_extension,
    normalize_mac_address,
    normalize_name,
)

__all__ = [
    "normalize_email",
    "normalize_extension",
    "normalize_mac_address",
    "normalize_name",
]
