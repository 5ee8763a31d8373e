"""SOS alerts API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from civicdesk.core.deps import get_current_user, get_dispatcher, require_roles
from civicdesk.core.report_policies import ADMIN_ROLES
from civicdesk.db.session import get_db
from civicdesk.models.user import User
from civicdesk.schemas.sos import SosCreate, SosReportResponse
from civicdesk.services.notification_service import NotificationDispatcher
from civicdesk.services.sos_service import create_sos_report, get_sos_report, list_sos_reports

router = APIRouter(prefix="/sos", tags=["sos"])


@router.post("", response_model=SosReportResponse, status_code=status.HTTP_201_CREATED)
def create_sos(
    data: SosCreate,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    current_user: User = Depends(get_current_user),
):
    """Raise an SOS. Admins and staff are notified before the response returns."""
    return create_sos_report(db, data.lat, data.lng, current_user.id, dispatcher)


@router.get("", response_model=list[SosReportResponse])
def list_sos(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """List SOS alerts, newest first."""
    return list_sos_reports(db, limit)


@router.get("/{sos_id}", response_model=SosReportResponse)
def get_sos(
    sos_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Get one SOS alert."""
    return get_sos_report(db, sos_id)
