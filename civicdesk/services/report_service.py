"""Report service: creation, lookups and the filtered/paginated query builder."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from civicdesk.core.exceptions import NotFound, ValidationFailure
from civicdesk.core.report_policies import (
    DEFAULT_PAGE_SIZE,
    DESCRIPTION_MAX_LENGTH,
    MAX_NEARBY_RADIUS_KM,
    MIN_NEARBY_RADIUS_KM,
    TITLE_MAX_LENGTH,
)
from civicdesk.db.session import transaction
from civicdesk.models.enums import ReportStatus
from civicdesk.models.report import Report
from civicdesk.models.report_response import ReportResponse
from civicdesk.models.task import Task
from civicdesk.schemas.common import PaginationMeta
from civicdesk.schemas.report import ReportDetail
from civicdesk.schemas.task import ReportResponseItem, TaskResponse
from civicdesk.services.geo_service import bounding_box, haversine_km
from civicdesk.services.identity_service import require_user
from civicdesk.services.validation import (
    as_utc,
    parse_enum,
    require_text,
    validate_coordinates,
    validate_page,
)

logger = logging.getLogger(__name__)


@dataclass
class ReportFilter:
    """Criteria for listing reports. ``None`` means no constraint on that field."""

    status: ReportStatus | str | None = None
    user_id: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE


def _conditions(flt: ReportFilter) -> list:
    conditions = []
    if flt.status is not None:
        conditions.append(Report.status == parse_enum(ReportStatus, flt.status))
    if flt.user_id is not None:
        conditions.append(Report.user_id == flt.user_id)
    date_from = as_utc(flt.date_from)
    date_to = as_utc(flt.date_to)
    if date_from is not None:
        conditions.append(Report.created_at >= date_from)
    if date_to is not None:
        conditions.append(Report.created_at <= date_to)
    return conditions


def list_reports(db: Session, flt: ReportFilter | None = None) -> tuple[list[Report], PaginationMeta]:
    """Filtered page of reports, newest first; equal timestamps keep insertion order.

    All provided filters combine with AND. ``total_pages`` is never below 1.
    """
    flt = flt or ReportFilter()
    page, limit = validate_page(flt.page, flt.limit)
    conditions = _conditions(flt)

    total = db.execute(select(func.count()).select_from(Report).where(*conditions)).scalar_one()
    result = db.execute(
        select(Report)
        .where(*conditions)
        .order_by(Report.created_at.desc(), Report.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    items = list(result.scalars().all())
    meta = PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=max(1, math.ceil(total / limit)),
    )
    return items, meta


def _list_all(db: Session, flt: ReportFilter) -> list[Report]:
    result = db.execute(
        select(Report)
        .where(*_conditions(flt))
        .order_by(Report.created_at.desc(), Report.id.asc())
    )
    return list(result.scalars().all())


def list_reports_by_user(db: Session, user_id: int) -> list[Report]:
    """All reports submitted by a user, newest first."""
    return _list_all(db, ReportFilter(user_id=user_id))


def list_reports_by_status(db: Session, status: ReportStatus | str) -> list[Report]:
    """All reports in a status, newest first."""
    return _list_all(db, ReportFilter(status=status))


def require_report(db: Session, report_id: int) -> Report:
    """Get report by id or raise NotFound."""
    report = db.get(Report, report_id)
    if not report:
        raise NotFound("Report", report_id)
    return report


def get_report_detail(db: Session, report_id: int) -> ReportDetail:
    """Report with its tasks (newest first) and responses (oldest first)."""
    report = require_report(db, report_id)
    tasks = db.execute(
        select(Task)
        .where(Task.report_id == report_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
    ).scalars().all()
    responses = db.execute(
        select(ReportResponse)
        .where(ReportResponse.report_id == report_id)
        .order_by(ReportResponse.responded_at.asc(), ReportResponse.id.asc())
    ).scalars().all()
    return ReportDetail(
        id=report.id,
        title=report.title,
        description=report.description,
        attachment_path=report.attachment_path,
        lat=report.lat,
        lng=report.lng,
        user_id=report.user_id,
        status=report.status,
        created_at=report.created_at,
        updated_at=report.updated_at,
        tasks=[TaskResponse.model_validate(t) for t in tasks],
        responses=[ReportResponseItem.model_validate(r) for r in responses],
    )


def create_report(
    db: Session,
    user_id: int,
    title: str,
    description: str,
    lat: float,
    lng: float,
    attachment_path: str | None = None,
) -> Report:
    """Create a report in PENDING for the submitting user."""
    lat, lng = validate_coordinates(lat, lng)
    title = require_text(title, "title", TITLE_MAX_LENGTH).strip()
    description = require_text(description, "description", DESCRIPTION_MAX_LENGTH)
    require_user(db, user_id)

    report = Report(
        title=title,
        description=description,
        attachment_path=attachment_path,
        lat=lat,
        lng=lng,
        user_id=user_id,
        status=ReportStatus.PENDING,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("Report %s created by user %s at (%s, %s)", report.id, user_id, lat, lng)
    return report


def update_report(
    db: Session,
    report_id: int,
    title: str | None = None,
    description: str | None = None,
    attachment_path: str | None = None,
) -> Report:
    """Edit a report's content. Only provided fields change; status is not editable here."""
    if title is not None:
        title = require_text(title, "title", TITLE_MAX_LENGTH).strip()
    if description is not None:
        description = require_text(description, "description", DESCRIPTION_MAX_LENGTH)

    with transaction(db, step=f"edit report {report_id}"):
        report = require_report(db, report_id)
        if title is not None:
            report.title = title
        if description is not None:
            report.description = description
        if attachment_path is not None:
            report.attachment_path = attachment_path
    db.refresh(report)
    return report


def update_report_status(db: Session, report_id: int, new_status: ReportStatus | str) -> Report:
    """Set a report's status directly.

    Administrative override: no transition check is made against the
    current status.
    """
    new_status = parse_enum(ReportStatus, new_status)
    with transaction(db, step=f"set report {report_id} status"):
        report = require_report(db, report_id)
        previous = report.status
        report.status = new_status
    db.refresh(report)
    logger.info("Report %s status set %s -> %s", report_id, previous.value, new_status.value)
    return report


def delete_report(db: Session, report_id: int) -> None:
    """Remove a report with its tasks and responses."""
    with transaction(db, step=f"delete report {report_id}"):
        report = require_report(db, report_id)
        db.execute(delete(ReportResponse).where(ReportResponse.report_id == report_id))
        db.execute(delete(Task).where(Task.report_id == report_id))
        db.delete(report)
    logger.info("Report %s deleted", report_id)


def find_reports_nearby(
    db: Session,
    lat: float,
    lng: float,
    radius_km: float,
) -> list[tuple[Report, float]]:
    """Reports within ``radius_km`` of a point as (report, distance_km), nearest first."""
    lat, lng = validate_coordinates(lat, lng)
    if not MIN_NEARBY_RADIUS_KM <= radius_km <= MAX_NEARBY_RADIUS_KM:
        raise ValidationFailure(
            f"radius_km must be between {MIN_NEARBY_RADIUS_KM:g} and {MAX_NEARBY_RADIUS_KM:g}"
        )
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
    candidates = db.execute(
        select(Report).where(
            Report.lat.between(min_lat, max_lat),
            Report.lng.between(min_lng, max_lng),
        )
    ).scalars().all()

    nearby: list[tuple[Report, float]] = []
    for report in candidates:
        dist = haversine_km(lat, lng, report.lat, report.lng)
        if dist <= radius_km:
            nearby.append((report, round(dist, 3)))
    # nearest first, then newest
    nearby.sort(key=lambda pair: (pair[1], -pair[0].created_at.timestamp(), pair[0].id))
    return nearby
