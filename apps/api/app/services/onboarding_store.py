"""Store interface for onboarding records and wizard sessions.

Upserts use shallow-merge semantics: keys present in the patch replace the
stored value, everything else is left alone.
"""

from typing import Any

from sqlalchemy.orm import Session

from app.db.base import utcnow
from app.db.models import Location, LocationOnboarding, OnboardingSession, Phone


def onboarding_id_for(location_id: str) -> str:
    return f"onboarding-{location_id}"


def get_location(db: Session, location_id: str) -> Location | None:
    return db.query(Location).filter(Location.id == location_id).first()


def get_onboarding(db: Session, location_id: str) -> LocationOnboarding | None:
    """Get the onboarding record for a location, if one has been written."""
    return (
        db.query(LocationOnboarding)
        .filter(LocationOnboarding.location_id == location_id)
        .first()
    )


def get_phones(db: Session, location_id: str) -> list[Phone]:
    return (
        db.query(Phone)
        .filter(Phone.location_id == location_id)
        .order_by(Phone.created_at, Phone.id)
        .all()
    )


def count_phones(db: Session, location_id: str) -> int:
    return db.query(Phone).filter(Phone.location_id == location_id).count()


def upsert_onboarding(
    db: Session,
    location_id: str,
    patch: dict[str, Any],
    commit: bool = True,
) -> LocationOnboarding:
    """
    Merge ``patch`` over the location's onboarding, creating it if needed.

    Unknown keys are ignored. ``updated_at`` is always stamped, even for an
    empty patch.
    """
    onboarding = get_onboarding(db, location_id)
    if onboarding is None:
        onboarding = LocationOnboarding(
            id=onboarding_id_for(location_id),
            location_id=location_id,
        )
        db.add(onboarding)

    for key, value in patch.items():
        if key in ("id", "location_id", "created_at", "updated_at"):
            continue
        if hasattr(LocationOnboarding, key):
            setattr(onboarding, key, value)

    onboarding.updated_at = utcnow()
    if commit:
        db.commit()
        db.refresh(onboarding)
    else:
        db.flush()
    return onboarding


def get_session(db: Session, location_id: str) -> OnboardingSession | None:
    return db.get(OnboardingSession, location_id)


def upsert_session(
    db: Session,
    location_id: str,
    patch: dict[str, Any],
    commit: bool = True,
) -> OnboardingSession:
    """Merge ``patch`` over the location's session, creating it if needed."""
    session = get_session(db, location_id)
    if session is None:
        session = OnboardingSession(location_id=location_id, completed_steps=[])
        db.add(session)

    for key, value in patch.items():
        if key == "completed_steps":
            # JSON column: always assign a fresh list
            value = [getattr(step, "value", step) for step in value]
        elif hasattr(value, "value"):
            value = value.value
        setattr(session, key, value)

    session.updated_at = utcnow()
    if commit:
        db.commit()
        db.refresh(session)
    else:
        db.flush()
    return session
