"""Live SOS feed for staff and admin dashboards.

Clients connect to ``/ws?token=<jwt>``. The server pushes ``sos.created``
events and answers ``ping`` with ``pong``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from civicdesk.core.report_policies import TASK_ROLES
from civicdesk.core.security import decode_access_token, subject_user_id
from civicdesk.core.ws_manager import encode_event, ws_manager
from civicdesk.db.session import SessionLocal
from civicdesk.models.user import User
from civicdesk.services.identity_service import get_user

logger = logging.getLogger(__name__)

router = APIRouter()

CLOSE_MISSING_TOKEN = 4001
CLOSE_FORBIDDEN = 4003


def _dashboard_user(token: str) -> User | None:
    payload = decode_access_token(token)
    user_id = subject_user_id(payload) if payload else None
    if user_id is None:
        return None
    with SessionLocal() as db:
        user = get_user(db, user_id)
        if user is None or not user.is_active or user.role not in TASK_ROLES:
            return None
        db.expunge(user)
        return user


@router.websocket("/ws")
async def dashboard_feed(websocket: WebSocket):
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=CLOSE_MISSING_TOKEN, reason="Missing token")
        return

    user = _dashboard_user(token)
    if user is None:
        logger.info("Rejected dashboard socket: invalid token or role")
        await websocket.close(code=CLOSE_FORBIDDEN, reason="Invalid token or role")
        return

    await ws_manager.connect(websocket, user.id)
    try:
        while True:
            if await websocket.receive_text() == "ping":
                await websocket.send_text(encode_event("pong", None))
    except WebSocketDisconnect:
        pass
    finally:
        ws_manager.disconnect(websocket, user.id)
