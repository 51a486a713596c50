import pytest

from app.services import extension_service
from app.services.extension_service import (
    ExtensionSeriesNotFoundError,
    InsufficientExtensionsError,
    InvalidExtensionRangeError,
)


def _series(db, location, **overrides):
    config = {
        "location_id": location.id,
        "prefix": None,
        "start_range": 100,
        "end_range": 110,
        "reserved_extensions": [],
    }
    config.update(overrides)
    return extension_service.create_extension_series(db, config)


def test_format_extension_pads_only_with_prefix():
    assert extension_service.format_extension(None, 7) == "7"
    assert extension_service.format_extension("5", 7) == "5007"
    assert extension_service.format_extension("5", 1234) == "51234"


def test_parse_extension_number():
    assert extension_service.parse_extension_number("5", "5007") == 7
    assert extension_service.parse_extension_number("5", "6007") is None
    assert extension_service.parse_extension_number(None, "1a") is None


def test_invalid_ranges_rejected(db, location):
    with pytest.raises(InvalidExtensionRangeError, match="Start range must be less than end range"):
        _series(db, location, start_range=200, end_range=200)
    with pytest.raises(InvalidExtensionRangeError, match="Extension ranges must be positive"):
        _series(db, location, start_range=-5, end_range=10)


def test_recreating_series_keeps_reservations(db, location):
    _series(db, location, reserved_extensions=["101", "102"])
    series = _series(db, location, start_range=100, end_range=200, reserved_extensions=["102", "150"])
    assert series.end_range == 200
    assert series.reserved_extensions == ["101", "102", "150"]


def test_initialize_uses_default_range(db, location):
    series = extension_service.initialize_extension_series(db, location.id)
    assert (series.start_range, series.end_range) == (1000, 9999)
    # Idempotent
    assert extension_service.initialize_extension_series(db, location.id) is series


def test_generate_skips_used_and_reserved(db, location, add_phone):
    _series(db, location, reserved_extensions=["101"])
    add_phone(location, extension="100")
    assert extension_service.generate_available_extensions(db, location.id, 3) == ["102", "103", "104"]


def test_generate_small_series_with_reservation(db, location):
    _series(db, location, start_range=1000, end_range=1002, reserved_extensions=["1000"])
    assert extension_service.generate_available_extensions(db, location.id, 2) == ["1001", "1002"]
    with pytest.raises(InsufficientExtensionsError):
        extension_service.generate_available_extensions(db, location.id, 3)


def test_generate_is_read_only(db, location):
    _series(db, location)
    first = extension_service.generate_available_extensions(db, location.id, 2)
    second = extension_service.generate_available_extensions(db, location.id, 2)
    assert first == second == ["100", "101"]


def test_generate_with_prefix(db, location):
    _series(db, location, prefix="7", start_range=1, end_range=5)
    assert extension_service.generate_available_extensions(db, location.id, 2) == ["7001", "7002"]


def test_generate_without_series(db, location):
    with pytest.raises(ExtensionSeriesNotFoundError, match="No extension series configured"):
        extension_service.generate_available_extensions(db, location.id, 1)


def test_generate_insufficient(db, location):
    _series(db, location, start_range=100, end_range=101)
    with pytest.raises(InsufficientExtensionsError, match="Found 2, needed 3"):
        extension_service.generate_available_extensions(db, location.id, 3)


def test_is_extension_available(db, location, add_phone):
    _series(db, location, reserved_extensions=["105"])
    add_phone(location, extension="101")
    assert extension_service.is_extension_available(db, location.id, "100") is True
    assert extension_service.is_extension_available(db, location.id, "101") is False
    assert extension_service.is_extension_available(db, location.id, "105") is False
    assert extension_service.is_extension_available(db, location.id, "999") is False
    assert extension_service.is_extension_available(db, location.id, "abc") is False


def test_reserve_extension_is_idempotent(db, location):
    _series(db, location)
    extension_service.reserve_extension(db, location.id, "103")
    series = extension_service.reserve_extension(db, location.id, "103")
    assert series.reserved_extensions == ["103"]


def test_allocate_reserves_extensions(db, location):
    _series(db, location)
    assert extension_service.allocate_extensions(db, location.id, 2) == ["100", "101"]
    # A second allocation never hands out the same numbers
    assert extension_service.allocate_extensions(db, location.id, 2) == ["102", "103"]
    series = extension_service.get_extension_series(db, location.id)
    assert series.reserved_extensions == ["100", "101", "102", "103"]


def test_allocate_insufficient_reserves_nothing(db, location):
    _series(db, location, start_range=100, end_range=101)
    with pytest.raises(InsufficientExtensionsError):
        extension_service.allocate_extensions(db, location.id, 5)
    assert extension_service.get_extension_series(db, location.id).reserved_extensions == []
