"""Task assignment and the report/task lifecycle.

Transitions driven here:

    assign_staff      report PENDING -> IN_PROGRESS (other statuses untouched),
                      new task NOT_RECEIVED
    add_notes         task NOT_RECEIVED -> IN_PROGRESS (first note acknowledges
                      receipt), other statuses untouched
    resolve_report    task -> COMPLETED, report -> RESOLVED (unconditional)
    update_task_status / report_service.update_report_status
                      direct overwrite, no edge check

The overwrites are permissive on purpose: callers are role-gated at the API
boundary and the engine does not re-derive legality. Concurrent transitions
on the same record are last-write-wins.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from civicdesk.core.exceptions import NotFound
from civicdesk.core.report_policies import (
    DEFAULT_TASK_DETAILS,
    NOTES_MAX_LENGTH,
    NOTES_PREFIX,
    NOTES_SEPARATOR,
    TASK_DETAILS_MAX_LENGTH,
)
from civicdesk.db.session import transaction
from civicdesk.models.enums import ReportStatus, TaskStatus
from civicdesk.models.report import Report
from civicdesk.models.report_response import ReportResponse
from civicdesk.models.task import Task
from civicdesk.models.user import User
from civicdesk.schemas.task import AssignedTaskResponse, TaskReportSummary
from civicdesk.schemas.user import UserSummary
from civicdesk.services.identity_service import require_user
from civicdesk.services.report_service import require_report
from civicdesk.services.validation import parse_enum, require_text

logger = logging.getLogger(__name__)


def append_notes(details: str | None, notes: str) -> str:
    """Append a notes block to task details."""
    block = f"{NOTES_PREFIX}{notes}"
    if not details:
        return block
    return f"{details}{NOTES_SEPARATOR}{block}"


def require_task(db: Session, task_id: int) -> Task:
    """Get task by id or raise NotFound."""
    task = db.get(Task, task_id)
    if not task:
        raise NotFound("Task", task_id)
    return task


def _task_under_report(db: Session, report_id: int, task_id: int, assignee_id: int | None = None) -> Task:
    stmt = select(Task).where(Task.id == task_id, Task.report_id == report_id)
    if assignee_id is not None:
        stmt = stmt.where(Task.assigned_to == assignee_id)
    task = db.execute(stmt).scalar_one_or_none()
    if not task:
        # Ownership mismatches are reported exactly like a missing task.
        raise NotFound("Task", task_id)
    return task


def assign_staff(
    db: Session,
    report_id: int,
    assignee_id: int,
    assigner_id: int,
    details: str | None = None,
) -> Task:
    """Create a NOT_RECEIVED task for ``assignee_id`` on a report.

    A PENDING report advances to IN_PROGRESS; any other status is left as is.
    """
    if details is not None:
        details = require_text(details, "task_details", TASK_DETAILS_MAX_LENGTH)

    with transaction(db, step=f"assign report {report_id}"):
        report = require_report(db, report_id)
        require_user(db, assignee_id)
        require_user(db, assigner_id)

        task = Task(
            report_id=report.id,
            assigned_by=assigner_id,
            assigned_to=assignee_id,
            details=details if details is not None else DEFAULT_TASK_DETAILS.format(title=report.title),
            status=TaskStatus.NOT_RECEIVED,
        )
        db.add(task)

        previous = report.status
        if report.status == ReportStatus.PENDING:
            report.status = ReportStatus.IN_PROGRESS
        db.flush()

    db.refresh(task)
    logger.info(
        "Report %s assigned to user %s by user %s (task %s, report %s -> %s)",
        report_id,
        assignee_id,
        assigner_id,
        task.id,
        previous.value,
        report.status.value,
    )
    return task


def add_notes(db: Session, report_id: int, task_id: int, author_id: int, notes: str) -> Task:
    """Append investigation notes to a report's task and record them as a response.

    The first note on a NOT_RECEIVED task moves it to IN_PROGRESS.
    """
    notes = require_text(notes, "notes", NOTES_MAX_LENGTH)

    with transaction(db, step=f"add notes to task {task_id}"):
        task = _task_under_report(db, report_id, task_id)
        require_user(db, author_id)
        task.details = append_notes(task.details, notes)
        if task.status == TaskStatus.NOT_RECEIVED:
            task.status = TaskStatus.IN_PROGRESS
        db.add(
            ReportResponse(
                report_id=report_id,
                task_id=task.id,
                responded_by=author_id,
                response_text=notes,
            )
        )

    db.refresh(task)
    logger.info("Notes added to task %s (report %s) by user %s", task_id, report_id, author_id)
    return task


def resolve_report(db: Session, report_id: int, task_id: int, staff_id: int) -> Report:
    """Complete the caller's own task and mark its report RESOLVED."""
    with transaction(db, step=f"resolve report {report_id}"):
        task = _task_under_report(db, report_id, task_id, assignee_id=staff_id)
        report = require_report(db, report_id)
        task.status = TaskStatus.COMPLETED
        report.status = ReportStatus.RESOLVED

    db.refresh(report)
    logger.info("Report %s resolved by user %s via task %s", report_id, staff_id, task_id)
    return report


def update_task_status(db: Session, task_id: int, new_status: TaskStatus | str) -> Task:
    """Set a task's status directly (no transition check)."""
    new_status = parse_enum(TaskStatus, new_status)
    with transaction(db, step=f"set task {task_id} status"):
        task = require_task(db, task_id)
        previous = task.status
        if previous != new_status:
            task.status = new_status

    db.refresh(task)
    if previous != new_status:
        logger.info("Task %s status set %s -> %s", task_id, previous.value, new_status.value)
    return task


def get_assigned_tasks(db: Session, assignee_id: int) -> list[AssignedTaskResponse]:
    """Tasks assigned to a user, newest first, with their report and assigner."""
    result = db.execute(
        select(Task)
        .where(Task.assigned_to == assignee_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    tasks = list(result.scalars().all())

    reports: dict[int, Report | None] = {}
    assigners: dict[int, User | None] = {}
    enriched = []
    for task in tasks:
        if task.report_id not in reports:
            reports[task.report_id] = db.get(Report, task.report_id)
        if task.assigned_by not in assigners:
            assigners[task.assigned_by] = db.get(User, task.assigned_by)
        report = reports[task.report_id]
        assigner = assigners[task.assigned_by]
        enriched.append(
            AssignedTaskResponse(
                id=task.id,
                report_id=task.report_id,
                assigned_by=task.assigned_by,
                assigned_to=task.assigned_to,
                details=task.details,
                status=task.status,
                created_at=task.created_at,
                updated_at=task.updated_at,
                report=TaskReportSummary.model_validate(report) if report else None,
                assigner=UserSummary.model_validate(assigner) if assigner else None,
            )
        )
    return enriched
