"""Pytest fixtures."""

import itertools
import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from civicdesk.core.deps import get_notification_sink
from civicdesk.core.security import create_access_token
from civicdesk.db.base import Base
from civicdesk.db.session import get_db
from civicdesk.main import app
from civicdesk.models import Report, ReportStatus, Task, TaskStatus, User, UserRole  # noqa: F401 - register for create_all
from civicdesk.services.notification_sinks import NotificationSink

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class RecordingSink(NotificationSink):
    """Keeps every delivered (recipient, payload) pair; can fail chosen recipients."""

    channel_name = "recording"

    def __init__(self) -> None:
        self.sent: list[tuple[User, dict]] = []
        self.fail_for: set[int] = set()
        self.on_send = None

    def send(self, recipient, payload):
        if self.on_send is not None:
            self.on_send(recipient, payload)
        if recipient.id in self.fail_for:
            raise ConnectionError(f"cannot reach user {recipient.id}")
        self.sent.append((recipient, payload))
        return self._ok(recipient)


@pytest.fixture
def db():
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def client(db, sink, monkeypatch):
    """Test client sharing the test session and recording notifications."""
    from civicdesk.api import ws

    def override_get_db():
        yield db

    monkeypatch.setattr(ws, "SessionLocal", TestingSessionLocal)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sink] = lambda: sink
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role=UserRole.USER, created_at=None, is_active=True, email=None):
        n = next(counter)
        user = User(
            email=email or f"{role.value}{n}@example.com",
            full_name=f"{role.value.title()} {n}",
            role=role,
            is_active=is_active,
        )
        if created_at is not None:
            user.created_at = created_at
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_report(db, make_user):
    default_owner = []

    def _make(user=None, status=ReportStatus.PENDING, created_at=None, title="Broken streetlight", lat=10.76, lng=106.66):
        if user is None:
            if not default_owner:
                default_owner.append(make_user())
            user = default_owner[0]
        report = Report(
            title=title,
            description="The streetlight has been flickering for two nights.",
            lat=lat,
            lng=lng,
            user_id=user.id,
            status=status,
        )
        if created_at is not None:
            report.created_at = created_at
        db.add(report)
        db.commit()
        db.refresh(report)
        return report

    return _make


@pytest.fixture
def auth():
    """Authorization header for a user, as issued by the identity provider."""

    def _auth(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth


@pytest.fixture
def minutes():
    """Timestamp ``n`` minutes after a fixed base time."""

    def _at(n):
        return BASE_TIME + timedelta(minutes=n)

    return _at
