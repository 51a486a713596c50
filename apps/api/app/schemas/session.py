"""Pydantic schemas for the onboarding wizard session."""

from pydantic import BaseModel, Field

from app.db.enums import OnboardingStatus, OnboardingStep


class SessionRead(BaseModel):
    id: str
    location_id: str
    current_step: OnboardingStep
    completed_steps: list[OnboardingStep]
    status: OnboardingStatus
    is_locked: bool

    model_config = {"from_attributes": True}


class StepUpdate(BaseModel):
    """Move the wizard to a step, or mark a step complete."""
    step: OnboardingStep
    complete: bool = Field(False, description="Complete the step instead of navigating to it")


class StatusUpdate(BaseModel):
    status: OnboardingStatus
    lock_session: bool = False


class CanSubmitRead(BaseModel):
    can_submit: bool
    reasons: list[str] = Field(default_factory=list)


class ProgressRead(BaseModel):
    completed_steps: int
    total_steps: int
    percentage: int


class SubmitResponse(BaseModel):
    success: bool
    status: OnboardingStatus
    payload_valid: bool
    payload_errors: list[str] = Field(default_factory=list)


class SkipRuleRead(BaseModel):
    field: str
    should_skip: bool
    reason: str
