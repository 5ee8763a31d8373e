"""Database session management."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from civicdesk.core.config import settings
from civicdesk.core.exceptions import Conflict, DomainError, TransactionFailure

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI to get DB session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, step: str = "write") -> Iterator[Session]:
    """Run a multi-step write as one unit of work.

    Commits when the block exits cleanly. Any failure rolls back every change
    made inside the block:

    - domain errors propagate unchanged,
    - ``IntegrityError`` is re-raised as ``Conflict``,
    - any other SQLAlchemy error is re-raised as ``TransactionFailure``
      naming the step and the underlying cause.
    """
    try:
        yield db
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning("%s rolled back on integrity error: %s", step, exc.orig)
        raise Conflict(f"{step} conflicts with an existing record: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("%s rolled back: %s", step, exc)
        raise TransactionFailure(f"{step} failed: {exc}") from exc
