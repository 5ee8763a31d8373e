"""Notification sinks: where a single recipient's notification is delivered.

A sink reports each attempt as a ``DeliveryResult``. Sinks may also raise;
the dispatcher treats an exception as a failed delivery and moves on.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import anyio.from_thread
import httpx

from civicdesk.core.config import settings
from civicdesk.core.ws_manager import ConnectionManager, ws_manager
from civicdesk.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Outcome of one delivery attempt."""

    success: bool
    recipient_id: int
    channel: str
    error: str | None = None


class NotificationSink(ABC):
    """Delivers one payload to one recipient."""

    channel_name: str = "base"

    @abstractmethod
    def send(self, recipient: User, payload: dict[str, Any]) -> DeliveryResult:
        """Deliver ``payload`` to ``recipient``."""

    def _ok(self, recipient: User) -> DeliveryResult:
        return DeliveryResult(success=True, recipient_id=recipient.id, channel=self.channel_name)

    def _failed(self, recipient: User, error: str) -> DeliveryResult:
        return DeliveryResult(success=False, recipient_id=recipient.id, channel=self.channel_name, error=error)


class LogSink(NotificationSink):
    """Writes the notification to the application log."""

    channel_name = "log"

    def send(self, recipient: User, payload: dict[str, Any]) -> DeliveryResult:
        logger.info(
            "Notify %s %s => %s",
            recipient.role.value,
            recipient.email,
            json.dumps(payload, default=str),
        )
        return self._ok(recipient)


class WebhookSink(NotificationSink):
    """POSTs each notification as JSON to an HTTP endpoint."""

    channel_name = "webhook"

    def __init__(self, url: str, timeout: float = 10.0, client: httpx.Client | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    def send(self, recipient: User, payload: dict[str, Any]) -> DeliveryResult:
        body = {
            "recipient": {
                "id": recipient.id,
                "email": recipient.email,
                "role": recipient.role.value,
            },
            "payload": payload,
        }
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=body, timeout=self.timeout)
            else:
                response = httpx.post(self.url, json=body, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            return self._failed(recipient, f"webhook request failed: {exc}")
        return self._ok(recipient)


class WebSocketSink(NotificationSink):
    """Pushes an ``sos.created`` event to the recipient's open dashboard sockets.

    Must be called from a worker thread of the running app (sync route
    handlers are); outside of it the push is reported as failed.
    """

    channel_name = "websocket"
    event_name = "sos.created"

    def __init__(self, manager: ConnectionManager | None = None) -> None:
        self.manager = manager or ws_manager

    def send(self, recipient: User, payload: dict[str, Any]) -> DeliveryResult:
        if not self.manager.is_connected(recipient.id):
            return self._failed(recipient, "no live connection")
        try:
            delivered = anyio.from_thread.run(
                self.manager.send_to_user, recipient.id, self.event_name, payload
            )
        except RuntimeError as exc:
            return self._failed(recipient, f"no event loop available: {exc}")
        if not delivered:
            return self._failed(recipient, "all connections closed")
        return self._ok(recipient)


def build_sink(name: str | None = None) -> NotificationSink:
    """Sink selected by ``settings.notification_sink`` (or ``name``)."""
    name = (name or settings.notification_sink).strip().lower()
    if name == "log":
        return LogSink()
    if name == "webhook":
        if not settings.notification_webhook_url:
            raise ValueError("NOTIFICATION_WEBHOOK_URL is not configured")
        return WebhookSink(settings.notification_webhook_url, timeout=settings.notification_timeout_seconds)
    if name == "websocket":
        return WebSocketSink()
    raise ValueError(f"Unsupported notification sink '{name}'. Use 'log', 'webhook' or 'websocket'.")
