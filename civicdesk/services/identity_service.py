"""Identity lookups over the local user mirror."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from civicdesk.core.exceptions import NotFound
from civicdesk.models.enums import UserRole
from civicdesk.models.user import User


def get_user(db: Session, user_id: int) -> User | None:
    """Get user by id."""
    return db.get(User, user_id)


def require_user(db: Session, user_id: int) -> User:
    """Get user by id or raise NotFound."""
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User", user_id)
    return user


def list_users_by_role(db: Session, role: UserRole | str, active_only: bool = False) -> list[User]:
    """Users holding ``role``, oldest account first."""
    stmt = select(User).where(User.role == UserRole(role))
    if active_only:
        stmt = stmt.where(User.is_active.is_(True))
    result = db.execute(stmt.order_by(User.created_at.asc(), User.id.asc()))
    return list(result.scalars().all())
