"""Pytest configuration and fixtures."""
import os

# Tests supply their own database through the get_db override
os.environ["DATABASE_URL"] = ""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base, get_db
from app.dependencies import get_submission_limiter
from app.main import app
from app.middleware.rate_limit import SubmissionCooldown, rate_limiter
from app.models import Submission, SubmissionStatus, Tool
from app.settings import settings

# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "moderator-secret"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock for cooldown tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def valid_submission_payload(**overrides):
    payload = {
        "title": "Box Breathing Guide",
        "url": "https://example.com/box-breathing",
        "category": "distress-tolerance",
        "description": "Four counts in, hold, four counts out, hold. Repeat until calm.",
        "creator_name": "Calm Lab",
        "creator_link": "https://example.com/about",
        "creator_background": "Therapists building free resources",
        "thumbnail_url": None,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope="function")
def payload():
    """Builder for valid submission payloads with per-test overrides."""
    return valid_submission_payload


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Login throttling state is process-wide; start every test clean."""
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def clock():
    return FakeClock()


@pytest.fixture(scope="function")
def submission_limiter(clock):
    """Fresh cooldown store for each test, driven by the fake clock."""
    return SubmissionCooldown(cooldown_seconds=300, max_clients=100, clock=clock)


@pytest.fixture(scope="function")
def client(db_session, submission_limiter):
    """Create a test client with overridden database and limiter dependencies."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_submission_limiter] = lambda: submission_limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def disabled_client(submission_limiter):
    """Test client with no database configured (soft-disabled store)."""
    def override_get_db():
        yield None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_submission_limiter] = lambda: submission_limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def admin_password(monkeypatch):
    """Configure the plain moderator secret."""
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", None)
    return ADMIN_PASSWORD


@pytest.fixture(scope="function")
def no_admin_secret(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", None)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", None)


@pytest.fixture(scope="function")
def admin_headers(admin_password):
    return {"X-Admin-Password": admin_password}


@pytest.fixture(scope="function")
def make_submission(db_session):
    """Factory for stored submissions with increasing creation times."""
    def _make(minutes: int = 0, status: str = SubmissionStatus.PENDING, **fields):
        data = valid_submission_payload(**fields)
        submission = Submission(
            **data,
            submitter_ip="10.0.0.1",
            status=status,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        db_session.add(submission)
        db_session.commit()
        db_session.refresh(submission)
        return submission

    return _make


@pytest.fixture(scope="function")
def make_tool(db_session):
    """Factory for stored tools (approved unless stated otherwise)."""
    def _make(title: str = "Tool", minutes: int = 0, **fields):
        data = {
            "title": title,
            "url": "https://example.com/tool",
            "category": "mindfulness",
            "description": "A helpful wellness practice.",
            "creator_name": "Someone",
            "approved": True,
            "created_at": BASE_TIME + timedelta(minutes=minutes),
        }
        data.update(fields)
        tool = Tool(**data)
        db_session.add(tool)
        db_session.commit()
        db_session.refresh(tool)
        return tool

    return _make


@pytest.fixture(scope="function")
def pending_submission(make_submission):
    return make_submission()


@pytest.fixture(scope="function")
def approved_tool(make_tool):
    return make_tool(title="Five Senses Grounding")
