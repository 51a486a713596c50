"""Extension series management and collision-free extension allocation."""

import logging
from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import EXTENSION_PAD_WIDTH
from app.core.structured_logging import build_log_context
from app.db.models import ExtensionSeries, Phone
from app.services.errors import InvalidRequestError, NotFoundError, StateConflictError

logger = logging.getLogger(__name__)


class InvalidExtensionRangeError(InvalidRequestError):
    pass


class ExtensionSeriesNotFoundError(NotFoundError):
    pass


class InsufficientExtensionsError(StateConflictError):
    pass


class ExtensionSeriesConfig(TypedDict, total=False):
    location_id: str
    prefix: str | None
    start_range: int
    end_range: int
    reserved_extensions: list[str]


def _merge_unique(existing: list[str], extra: list[str]) -> list[str]:
    merged = list(existing)
    for extension in extra:
        if extension not in merged:
            merged.append(extension)
    return merged


def format_extension(prefix: str | None, number: int) -> str:
    if prefix:
        return f"{prefix}{str(number).zfill(EXTENSION_PAD_WIDTH)}"
    return str(number)


def parse_extension_number(prefix: str | None, extension: str) -> int | None:
    """Numeric part of an extension, or None if it does not parse."""
    suffix = extension
    if prefix:
        if not extension.startswith(prefix):
            return None
        suffix = extension[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def get_extension_series(db: Session, location_id: str) -> ExtensionSeries | None:
    return db.get(ExtensionSeries, location_id)


def get_default_extension_series(location_id: str) -> ExtensionSeriesConfig:
    return ExtensionSeriesConfig(
        location_id=location_id,
        prefix=None,
        start_range=settings.DEFAULT_EXTENSION_START,
        end_range=settings.DEFAULT_EXTENSION_END,
        reserved_extensions=[],
    )


def create_extension_series(db: Session, config: ExtensionSeriesConfig) -> ExtensionSeries:
    """
    Create or replace a location's extension series.

    Re-creating keeps every previously reserved extension (ordered union).

    Raises:
        InvalidExtensionRangeError: start >= end, or a negative bound
    """
    start_range = config["start_range"]
    end_range = config["end_range"]
    if start_range >= end_range:
        raise InvalidExtensionRangeError("Start range must be less than end range")
    if start_range < 0 or end_range < 0:
        raise InvalidExtensionRangeError("Extension ranges must be positive")

    location_id = config["location_id"]
    reserved = list(config.get("reserved_extensions") or [])

    series = get_extension_series(db, location_id)
    if series is None:
        series = ExtensionSeries(location_id=location_id, reserved_extensions=[])
        db.add(series)

    series.prefix = config.get("prefix") or None
    series.start_range = start_range
    series.end_range = end_range
    series.reserved_extensions = _merge_unique(series.reserved_extensions or [], reserved)

    db.commit()
    db.refresh(series)
    return series


def initialize_extension_series(db: Session, location_id: str) -> ExtensionSeries:
    """Return the location's series, creating the default range if none exists."""
    series = get_extension_series(db, location_id)
    if series is not None:
        return series
    return create_extension_series(db, get_default_extension_series(location_id))


def _used_extensions(db: Session, location_id: str) -> set[str]:
    rows = (
        db.query(Phone.extension)
        .filter(Phone.location_id == location_id, Phone.extension.isnot(None))
        .all()
    )
    return {row[0] for row in rows}


def _candidates(series: ExtensionSeries, used: set[str], count: int) -> list[str]:
    reserved = set(series.reserved_extensions or [])
    available: list[str] = []
    for number in range(series.start_range, series.end_range + 1):
        if len(available) >= count:
            break
        extension = format_extension(series.prefix, number)
        if extension in used or extension in reserved:
            continue
        available.append(extension)
    return available


def generate_available_extensions(db: Session, location_id: str, count: int) -> list[str]:
    """
    Lowest ``count`` free extensions in the location's range.

    Read-only: calling twice without persisting may return the same
    candidates. Use ``allocate_extensions`` to claim them.

    Raises:
        ExtensionSeriesNotFoundError: no series configured
        InsufficientExtensionsError: fewer than ``count`` free in range
    """
    series = get_extension_series(db, location_id)
    if series is None:
        raise ExtensionSeriesNotFoundError(
            f"No extension series configured for location {location_id}"
        )

    available = _candidates(series, _used_extensions(db, location_id), count)
    if len(available) < count:
        raise InsufficientExtensionsError(
            f"Not enough available extensions. Found {len(available)}, needed {count}"
        )
    return available


def is_extension_available(db: Session, location_id: str, extension: str) -> bool:
    """True if the extension is in range, unreserved and not held by a phone."""
    series = get_extension_series(db, location_id)
    if series is None:
        return False

    number = parse_extension_number(series.prefix, extension)
    if number is None:
        return False
    if number < series.start_range or number > series.end_range:
        return False
    if extension in (series.reserved_extensions or []):
        return False
    return extension not in _used_extensions(db, location_id)


def reserve_extension(db: Session, location_id: str, extension: str) -> ExtensionSeries:
    """Add an extension to the reserved list (no-op if already reserved)."""
    series = get_extension_series(db, location_id)
    if series is None:
        raise ExtensionSeriesNotFoundError(
            f"No extension series configured for location {location_id}"
        )

    if extension not in (series.reserved_extensions or []):
        series.reserved_extensions = [*(series.reserved_extensions or []), extension]
        db.commit()
        db.refresh(series)
    return series


def allocate_extensions(
    db: Session,
    location_id: str,
    count: int,
    user_id: str | None = None,
) -> list[str]:
    """
    Generate and reserve ``count`` extensions in one transaction.

    The series row is locked for the duration so two concurrent
    allocations at the same location never receive the same extension.
    """
    series = (
        db.query(ExtensionSeries)
        .filter(ExtensionSeries.location_id == location_id)
        .with_for_update()
        .first()
    )
    if series is None:
        raise ExtensionSeriesNotFoundError(
            f"No extension series configured for location {location_id}"
        )

    available = _candidates(series, _used_extensions(db, location_id), count)
    if len(available) < count:
        db.rollback()
        raise InsufficientExtensionsError(
            f"Not enough available extensions. Found {len(available)}, needed {count}"
        )

    series.reserved_extensions = _merge_unique(series.reserved_extensions or [], available)
    db.commit()

    logger.info(
        f"Allocated {len(available)} extensions",
        extra=build_log_context(
            location_id=location_id,
            user_id=user_id,
            action="ALLOCATE_EXTENSIONS",
            extensions=available,
        ),
    )
    return available
