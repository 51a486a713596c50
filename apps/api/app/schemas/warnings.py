"""Dashboard warning schemas."""

from pydantic import BaseModel


class LocationBlockers(BaseModel):
    pending_approvals: int = 0
    has_unsupported_phones: bool = False


class LocationWarningFlags(BaseModel):
    missing_devices: bool = False
    incomplete_call_flow: bool = False


class LocationWarningsRead(BaseModel):
    location_id: str
    blockers: LocationBlockers
    warnings: LocationWarningFlags


class AccountBlockers(BaseModel):
    pending_approvals: int = 0
    locations_with_unsupported_phones: int = 0


class AccountWarningCounts(BaseModel):
    locations_missing_devices: int = 0
    locations_with_incomplete_call_flow: int = 0


class AccountWarningsRead(BaseModel):
    account_id: str
    blockers: AccountBlockers
    warnings: AccountWarningCounts
    locations: list[LocationWarningsRead]
