"""SOS report service."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from civicdesk.core.exceptions import NotFound
from civicdesk.models.sos_report import SosReport
from civicdesk.services.identity_service import require_user
from civicdesk.services.notification_service import AlertEvent, NotificationDispatcher
from civicdesk.services.validation import validate_coordinates

logger = logging.getLogger(__name__)


def create_sos_report(
    db: Session,
    lat: float,
    lng: float,
    user_id: int,
    dispatcher: NotificationDispatcher,
) -> SosReport:
    """Persist an SOS alert, then fan it out before returning.

    The record is committed before notification starts; a dispatcher failure
    is logged and never undoes or fails the submission.
    """
    lat, lng = validate_coordinates(lat, lng)
    require_user(db, user_id)

    sos = SosReport(user_id=user_id, lat=lat, lng=lng)
    db.add(sos)
    db.commit()
    db.refresh(sos)
    logger.info("SOS %s created by user %s at (%s, %s)", sos.id, user_id, lat, lng)

    try:
        dispatcher.notify(AlertEvent.from_sos(sos))
    except Exception:  # noqa: BLE001 - the alert is already stored
        logger.exception("SOS %s fan-out failed", sos.id)
        db.rollback()
    return sos


def list_sos_reports(db: Session, limit: int = 50) -> list[SosReport]:
    """List SOS reports, newest first."""
    result = db.execute(
        select(SosReport)
        .order_by(SosReport.created_at.desc(), SosReport.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


def get_sos_report(db: Session, sos_id: int) -> SosReport:
    """Get SOS report by id or raise NotFound."""
    sos = db.get(SosReport, sos_id)
    if not sos:
        raise NotFound("SOS report", sos_id)
    return sos
