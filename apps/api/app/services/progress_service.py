"""Progress figures for location and account dashboards."""

from typing import TypedDict

from sqlalchemy.orm import Session

from app.core.constants import REQUIRED_SUBMISSION_STEPS
from app.db.enums import OnboardingStatus
from app.db.models import Location, LocationOnboarding
from app.services import onboarding_session_service

TOTAL_STEPS = len(REQUIRED_SUBMISSION_STEPS)


class Progress(TypedDict):
    completed_steps: int
    total_steps: int
    percentage: int


def _percentage(completed: int, total: int) -> int:
    if total == 0:
        return 0
    return round(completed / total * 100)


def calculate_location_progress(db: Session, location_id: str) -> Progress:
    session = onboarding_session_service.get_or_create_session(db, location_id)
    completed = len(
        {step for step in session.completed_steps or []}
        & {step.value for step in REQUIRED_SUBMISSION_STEPS}
    )
    return Progress(
        completed_steps=completed,
        total_steps=TOTAL_STEPS,
        percentage=_percentage(completed, TOTAL_STEPS),
    )


def calculate_account_progress(db: Session, account_id: str) -> Progress:
    """Share of the account's locations whose onboarding is COMPLETED."""
    total = db.query(Location).filter(Location.account_id == account_id).count()
    completed = (
        db.query(LocationOnboarding)
        .join(Location, Location.id == LocationOnboarding.location_id)
        .filter(
            Location.account_id == account_id,
            LocationOnboarding.status == OnboardingStatus.COMPLETED.value,
        )
        .count()
    )
    return Progress(
        completed_steps=completed,
        total_steps=total,
        percentage=_percentage(completed, total),
    )
