"""Task and task-action schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from civicdesk.models.enums import ReportStatus, TaskStatus
from civicdesk.schemas.user import UserSummary


class AssignStaffRequest(BaseModel):
    staff_user_id: int
    task_details: str | None = Field(default=None, min_length=1, max_length=1000)


class AddNotesRequest(BaseModel):
    task_id: int
    notes: str = Field(min_length=1, max_length=2000)


class ResolveReportRequest(BaseModel):
    task_id: int


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskResponse(BaseModel):
    id: int
    report_id: int
    assigned_by: int
    assigned_to: int
    details: str | None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskReportSummary(BaseModel):
    id: int
    title: str
    status: ReportStatus
    lat: float
    lng: float
    created_at: datetime

    model_config = {"from_attributes": True}


class AssignedTaskResponse(TaskResponse):
    """A task as seen by its assignee, with its report and assigner."""

    report: TaskReportSummary | None = None
    assigner: UserSummary | None = None


class ReportResponseItem(BaseModel):
    id: int
    report_id: int
    task_id: int
    responded_by: int
    response_text: str
    responded_at: datetime

    model_config = {"from_attributes": True}
