"""SOS notification fan-out.

Recipients are resolved role by role in ``SOS_RECIPIENT_ORDER`` (admins, then
staff), each group oldest account first. The whole list is resolved before
the first send, and each group is finished before the next one starts, so no
staff notification for an event goes out before every admin notification.

Delivery is best-effort: a failed or raising sink call is logged and the
loop continues with the next recipient. There is no retry.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy.orm import Session

from civicdesk.core.report_policies import SOS_EVENT_KIND, SOS_RECIPIENT_ORDER
from civicdesk.models.enums import UserRole
from civicdesk.models.sos_report import SosReport
from civicdesk.models.user import User
from civicdesk.services.identity_service import list_users_by_role
from civicdesk.services.notification_sinks import DeliveryResult, NotificationSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertEvent:
    """An alert to broadcast."""

    kind: str
    source_id: int
    user_id: int
    lat: float
    lng: float

    @classmethod
    def from_sos(cls, sos: SosReport) -> "AlertEvent":
        return cls(kind=SOS_EVENT_KIND, source_id=sos.id, user_id=sos.user_id, lat=sos.lat, lng=sos.lng)

    def payload(self, priority: str) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "sourceId": self.source_id,
            "userId": self.user_id,
            "lat": self.lat,
            "lng": self.lng,
            "priority": priority,
        }


class RecipientDirectory(Protocol):
    """Read-only role lookup used to resolve recipients."""

    def users_with_role(self, role: UserRole) -> Sequence[User]: ...


class SqlRecipientDirectory:
    """Recipient lookup backed by the users table.

    Every account holding the role is a recipient unless ``active_only`` is set.
    """

    def __init__(self, db: Session, active_only: bool = False) -> None:
        self.db = db
        self.active_only = active_only

    def users_with_role(self, role: UserRole) -> Sequence[User]:
        return list_users_by_role(self.db, role, active_only=self.active_only)


class NotificationDispatcher:
    """Resolves who to notify for an alert and hands each payload to a sink."""

    def __init__(
        self,
        directory: RecipientDirectory,
        sink: NotificationSink,
        recipient_order: Sequence[tuple[UserRole, str]] = SOS_RECIPIENT_ORDER,
    ) -> None:
        self.directory = directory
        self.sink = sink
        self.recipient_order = tuple(recipient_order)

    def resolve(self) -> list[tuple[User, str]]:
        """Ordered (recipient, priority) pairs, one batch per role."""
        resolved: list[tuple[User, str]] = []
        for role, priority in self.recipient_order:
            resolved.extend((user, priority) for user in self.directory.users_with_role(role))
        return resolved

    def notify(self, event: AlertEvent) -> list[DeliveryResult]:
        """Send one notification per resolved recipient, in order."""
        results = [self._deliver(user, event.payload(priority)) for user, priority in self.resolve()]
        failed = sum(1 for r in results if not r.success)
        logger.info(
            "%s %s fan-out: %s recipients, %s failed (sink=%s)",
            event.kind,
            event.source_id,
            len(results),
            failed,
            self.sink.channel_name,
        )
        return results

    def _deliver(self, recipient: User, payload: dict[str, Any]) -> DeliveryResult:
        try:
            result = self.sink.send(recipient, payload)
        except Exception as exc:  # noqa: BLE001 - one recipient must not block the rest
            logger.warning("Notification to user %s raised: %s", recipient.id, exc)
            return DeliveryResult(
                success=False,
                recipient_id=recipient.id,
                channel=self.sink.channel_name,
                error=str(exc),
            )
        if not result.success:
            logger.warning(
                "Notification to user %s via %s failed: %s",
                recipient.id,
                result.channel,
                result.error,
            )
        return result
