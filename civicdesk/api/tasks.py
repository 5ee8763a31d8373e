"""Staff task API."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from civicdesk.core.deps import require_roles
from civicdesk.core.report_policies import TASK_ROLES
from civicdesk.db.session import get_db
from civicdesk.models.user import User
from civicdesk.schemas.report import ReportResponse
from civicdesk.schemas.task import (
    AddNotesRequest,
    AssignedTaskResponse,
    ResolveReportRequest,
    TaskResponse,
    TaskStatusUpdate,
)
from civicdesk.services.task_service import (
    add_notes,
    get_assigned_tasks,
    resolve_report,
    update_task_status,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/assigned", response_model=list[AssignedTaskResponse])
def list_assigned(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*TASK_ROLES)),
):
    """Tasks assigned to the caller, newest first."""
    return get_assigned_tasks(db, current_user.id)


@router.put("/{report_id}/notes", response_model=TaskResponse)
def notes(
    report_id: int,
    data: AddNotesRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*TASK_ROLES)),
):
    """Add investigation notes to one of the report's tasks."""
    return add_notes(db, report_id, data.task_id, current_user.id, data.notes)


@router.put("/{report_id}/resolve", response_model=ReportResponse)
def resolve(
    report_id: int,
    data: ResolveReportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*TASK_ROLES)),
):
    """Complete the caller's task and mark the report resolved."""
    return resolve_report(db, report_id, data.task_id, current_user.id)


@router.put("/{task_id}/status", response_model=TaskResponse)
def set_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*TASK_ROLES)),
):
    """Override a task's status."""
    return update_task_status(db, task_id, data.status)
