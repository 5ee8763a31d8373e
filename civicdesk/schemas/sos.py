"""SOS report schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class SosCreate(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class SosReportResponse(BaseModel):
    id: int
    user_id: int
    lat: float
    lng: float
    created_at: datetime

    model_config = {"from_attributes": True}
