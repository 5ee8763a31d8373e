"""Registry of open dashboard sockets, keyed by user id."""

import json
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def encode_event(event: str, data: Any) -> str:
    return json.dumps({"event": event, "data": data}, default=str)


class ConnectionManager:
    """A user may hold several sockets (one per open dashboard tab)."""

    def __init__(self) -> None:
        self._sockets: defaultdict[int, set[WebSocket]] = defaultdict(set)

    async def connect(self, websocket: WebSocket, user_id: int) -> None:
        await websocket.accept()
        self._sockets[user_id].add(websocket)
        logger.info("Dashboard socket opened for user %s (%s open)", user_id, self.total_connections)

    def disconnect(self, websocket: WebSocket, user_id: int) -> None:
        sockets = self._sockets.get(user_id)
        if sockets is not None:
            sockets.discard(websocket)
            if not sockets:
                del self._sockets[user_id]
        logger.info("Dashboard socket closed for user %s (%s open)", user_id, self.total_connections)

    def is_connected(self, user_id: int) -> bool:
        return bool(self._sockets.get(user_id))

    @property
    def connected_users(self) -> list[int]:
        return sorted(uid for uid, sockets in self._sockets.items() if sockets)

    @property
    def total_connections(self) -> int:
        return sum(len(sockets) for sockets in self._sockets.values())

    async def send_to_user(self, user_id: int, event: str, data: Any) -> int:
        """Push one event to every socket of ``user_id``; returns how many took it.

        Sockets that fail to send are dropped from the registry.
        """
        sockets = self._sockets.get(user_id)
        if not sockets:
            return 0
        message = encode_event(event, data)
        reached = 0
        for websocket in list(sockets):
            try:
                await websocket.send_text(message)
            except Exception as exc:  # noqa: BLE001
                logger.debug("Dropping dead socket for user %s: %s", user_id, exc)
                sockets.discard(websocket)
            else:
                reached += 1
        if not sockets:
            del self._sockets[user_id]
        return reached


ws_manager = ConnectionManager()
