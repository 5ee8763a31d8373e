"""SQLAlchemy models."""

from __future__ import annotations

from civicdesk.models.enums import ReportStatus, TaskStatus, UserRole
from civicdesk.models.report import Report
from civicdesk.models.report_response import ReportResponse
from civicdesk.models.sos_report import SosReport
from civicdesk.models.task import Task
from civicdesk.models.user import User

__all__ = [
    "User",
    "Report",
    "ReportResponse",
    "SosReport",
    "Task",
    "ReportStatus",
    "TaskStatus",
    "UserRole",
]
