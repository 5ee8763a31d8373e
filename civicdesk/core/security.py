"""JWT utilities for tokens issued by the identity provider."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from civicdesk.core.config import settings


def create_access_token(subject: str | int, extra: dict[str, Any] | None = None) -> str:
    """Mint a JWT the way the identity provider does (local development and tests)."""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(subject),
        "exp": expire,
        "iat": now,
    }
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    if extra:
        payload.update(extra)
    return jwt.encode(
        payload,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT. Returns payload or None if invalid."""
    options = {} if settings.jwt_audience else {"verify_aud": False}
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError:
        return None


def subject_user_id(payload: dict[str, Any]) -> int | None:
    """User id carried in the token's ``sub`` claim."""
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
