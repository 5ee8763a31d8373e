"""Enumerations shared by models and schemas."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    USER = "user"
    STAFF = "staff"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TaskStatus(str, enum.Enum):
    NOT_RECEIVED = "not_received"
    RECEIVED = "received"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
