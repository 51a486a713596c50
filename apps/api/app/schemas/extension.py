"""Pydantic schemas for extension series."""

from pydantic import BaseModel, Field


class ExtensionSeriesCreate(BaseModel):
    location_id: str
    prefix: str | None = Field(None, max_length=10)
    start_range: int
    end_range: int
    reserved_extensions: list[str] = Field(default_factory=list)


class ExtensionSeriesRead(BaseModel):
    location_id: str
    prefix: str | None
    start_range: int
    end_range: int
    reserved_extensions: list[str]

    model_config = {"from_attributes": True}


class ExtensionReserve(BaseModel):
    location_id: str
    extension: str = Field(..., min_length=1, max_length=20)


class ExtensionAllocate(BaseModel):
    location_id: str
    count: int = Field(1, ge=1, le=500)


class ExtensionList(BaseModel):
    extensions: list[str]


class ExtensionAvailability(BaseModel):
    extension: str
    available: bool
