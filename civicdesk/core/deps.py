"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from civicdesk.core.security import decode_access_token, subject_user_id
from civicdesk.db.session import get_db
from civicdesk.models.enums import UserRole
from civicdesk.models.user import User
from civicdesk.services.identity_service import get_user
from civicdesk.services.notification_service import NotificationDispatcher, SqlRecipientDirectory
from civicdesk.services.notification_sinks import NotificationSink, build_sink

security = HTTPBearer(auto_error=False)


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Require authenticated user. Raises 401 if not authenticated."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    user_id = subject_user_id(payload) if payload else None
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = get_user(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User is inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: current user must hold one of ``roles``."""
    allowed = frozenset(roles)

    def _require(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in allowed:
            names = ", ".join(sorted(r.value for r in allowed))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {names}",
            )
        return current_user

    return _require


def get_notification_sink() -> NotificationSink:
    """Sink configured for this deployment."""
    return build_sink()


def get_dispatcher(
    db: Annotated[Session, Depends(get_db)],
    sink: Annotated[NotificationSink, Depends(get_notification_sink)],
) -> NotificationDispatcher:
    """Dispatcher resolving recipients through the request's session."""
    return NotificationDispatcher(SqlRecipientDirectory(db), sink)
