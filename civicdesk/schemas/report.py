"""Report schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from civicdesk.models.enums import ReportStatus
from civicdesk.schemas.common import PaginationMeta
from civicdesk.schemas.task import ReportResponseItem, TaskResponse


class ReportCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    attachment_path: str | None = Field(default=None, max_length=500)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("title must be between 3 and 200 characters")
        return v


class ReportUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    attachment_path: str | None = Field(default=None, max_length=500)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 3:
            raise ValueError("title must be between 3 and 200 characters")
        return v


class ReportStatusUpdate(BaseModel):
    status: ReportStatus


class ReportResponse(BaseModel):
    id: int
    title: str
    description: str
    attachment_path: str | None
    lat: float
    lng: float
    user_id: int
    status: ReportStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReportDetail(ReportResponse):
    tasks: list[TaskResponse] = []
    responses: list[ReportResponseItem] = []


class NearbyReport(ReportResponse):
    distance_km: float


class PaginatedReports(BaseModel):
    data: list[ReportResponse]
    pagination: PaginationMeta
