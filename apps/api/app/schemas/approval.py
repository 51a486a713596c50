"""Pydantic schemas for approval requests."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.db.enums import ApprovalStatus, ApprovalType


class ApprovalCreate(BaseModel):
    type: ApprovalType
    location_id: str
    entity_id: str
    details: dict = Field(default_factory=dict)


class ApprovalResolve(BaseModel):
    comments: str | None = Field(None, max_length=2000)


class ApprovalRead(BaseModel):
    id: str
    type: ApprovalType
    location_id: str
    entity_id: str
    status: ApprovalStatus
    details: dict
    requested_by: str
    requested_at: datetime
    resolved_by: str | None
    resolved_at: datetime | None
    comments: str | None

    model_config = {"from_attributes": True}
