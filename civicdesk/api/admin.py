"""Administrator triage API: assignment and status overrides."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from civicdesk.core.deps import require_roles
from civicdesk.core.report_policies import ADMIN_ROLES
from civicdesk.db.session import get_db
from civicdesk.models.user import User
from civicdesk.schemas.report import ReportResponse, ReportStatusUpdate
from civicdesk.schemas.task import AssignStaffRequest, TaskResponse
from civicdesk.services.report_service import update_report_status
from civicdesk.services.task_service import assign_staff

router = APIRouter(prefix="/admin/reports", tags=["admin"])


@router.post("/{report_id}/assign", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def assign(
    report_id: int,
    data: AssignStaffRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Assign a staff member. A PENDING report moves to IN_PROGRESS."""
    return assign_staff(
        db,
        report_id,
        assignee_id=data.staff_user_id,
        assigner_id=current_user.id,
        details=data.task_details,
    )


@router.put("/{report_id}/status", response_model=ReportResponse)
def set_status(
    report_id: int,
    data: ReportStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Override a report's status."""
    return update_report_status(db, report_id, data.status)
