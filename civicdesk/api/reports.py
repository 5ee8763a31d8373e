"""Citizen-facing reports API."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from civicdesk.core.config import settings
from civicdesk.core.deps import get_current_user, require_roles
from civicdesk.core.report_policies import (
    ADMIN_ROLES,
    DEFAULT_PAGE_SIZE,
    MAX_NEARBY_RADIUS_KM,
    MAX_PAGE_SIZE,
    MIN_NEARBY_RADIUS_KM,
)
from civicdesk.db.session import get_db
from civicdesk.models.enums import ReportStatus
from civicdesk.models.user import User
from civicdesk.schemas.report import (
    NearbyReport,
    PaginatedReports,
    ReportCreate,
    ReportDetail,
    ReportResponse,
    ReportUpdate,
)
from civicdesk.services.report_service import (
    ReportFilter,
    create_report,
    delete_report,
    find_reports_nearby,
    get_report_detail,
    list_reports,
    list_reports_by_status,
    list_reports_by_user,
    update_report,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=PaginatedReports)
def list_all(
    status_filter: ReportStatus | None = Query(default=None, alias="status"),
    user_id: int | None = Query(default=None),
    date_from: datetime | None = Query(default=None, description="created_at lower bound (inclusive)"),
    date_to: datetime | None = Query(default=None, description="created_at upper bound (inclusive)"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List reports, newest first, filtered and paginated."""
    items, meta = list_reports(
        db,
        ReportFilter(
            status=status_filter,
            user_id=user_id,
            date_from=date_from,
            date_to=date_to,
            page=page,
            limit=limit,
        ),
    )
    return PaginatedReports(data=[ReportResponse.model_validate(r) for r in items], pagination=meta)


@router.get("/nearby", response_model=list[NearbyReport])
def list_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float | None = Query(default=None, ge=MIN_NEARBY_RADIUS_KM, le=MAX_NEARBY_RADIUS_KM),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Reports within a radius of a point, nearest first."""
    radius = radius_km if radius_km is not None else settings.nearby_default_radius_km
    return [
        NearbyReport(**ReportResponse.model_validate(report).model_dump(), distance_km=distance)
        for report, distance in find_reports_nearby(db, lat, lng, radius)
    ]


@router.get("/user/{user_id}", response_model=list[ReportResponse])
def list_for_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All reports submitted by a user, newest first."""
    return list_reports_by_user(db, user_id)


@router.get("/status/{report_status}", response_model=list[ReportResponse])
def list_for_status(
    report_status: ReportStatus,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All reports in a status, newest first."""
    return list_reports_by_status(db, report_status)


@router.get("/{report_id}", response_model=ReportDetail)
def get_one(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Report with its tasks and responses."""
    return get_report_detail(db, report_id)


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def create(
    data: ReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Submit a report. It starts PENDING and belongs to the caller."""
    return create_report(
        db,
        user_id=current_user.id,
        title=data.title,
        description=data.description,
        lat=data.lat,
        lng=data.lng,
        attachment_path=data.attachment_path,
    )


@router.put("/{report_id}", response_model=ReportResponse)
def update(
    report_id: int,
    data: ReportUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Edit a report's title, description or attachment."""
    return update_report(
        db,
        report_id,
        title=data.title,
        description=data.description,
        attachment_path=data.attachment_path,
    )


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Remove a report together with its tasks and responses."""
    delete_report(db, report_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
