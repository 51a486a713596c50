import pytest

from app.utils.normalization import (
    normalize_email,
    normalize_extension,
    normalize_mac_address,
    normalize_name,
)


@pytest.mark.parametrize(
    "raw",
    ["00:15:65:aa:bb:cc", "00-15-65-AA-BB-CC", "0015.65aa.bbcc", "001565aabbcc", " 00 15 65 AA BB CC "],
)
def test_mac_address_separators(raw):
    assert normalize_mac_address(raw) == "00:15:65:AA:BB:CC"


@pytest.mark.parametrize("raw", ["00:15:65:AA:BB", "00:15:65:AA:BB:CC:DD", "GG:15:65:AA:BB:CC"])
def test_mac_address_invalid(raw):
    with pytest.raises(ValueError, match="Invalid MAC address"):
        normalize_mac_address(raw)


def test_blank_values_become_none():
    assert normalize_mac_address("   ") is None
    assert normalize_mac_address(None) is None
    assert normalize_email("  ") is None
    assert normalize_name("   ") is None
    assert normalize_extension(" ") is None


def test_email_and_name():
    assert normalize_email("  Dana@Example.COM ") == "dana@example.com"
    assert normalize_name("  Dana \t Mae   Smith ") == "Dana Mae Smith"


def test_extension_keeps_leading_zeros():
    assert normalize_extension(" 0101 ") == "0101"
