"""Pytest configuration and shared fixtures."""

import os

# settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "unit-test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_ID"] = "college_admin_test"
os.environ["ADMIN_PASSWORD"] = "Admin@Test123"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE"] = ""

import pytest
from fastapi.testclient import TestClient

from campus_issues.core.security import AdminSession, hash_password, make_tokens
from campus_issues.db.base import Base
from campus_issues.db.session import SessionLocal, engine
from campus_issues.main import app
from campus_issues.models.issue import IssuePriority
from campus_issues.models.user import User
from campus_issues.repositories.issues import IssueRepository

# one hash for every fixture user keeps the suite fast
_PASSWORD = "password123"
_PASSWORD_HASH = hash_password(_PASSWORD)


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(email: str = "student@igdtuw.ac.in", name: str = "Student") -> User:
        user = User(email=email, name=name, hashed_password=_PASSWORD_HASH, is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_issue(db):
    def _make(owner: User | None = None, **overrides):
        fields = {
            "title": "Broken projector in Room 101",
            "description": "The projector does not turn on.",
            "category": "WiFi & Technology",
            "priority": IssuePriority.medium,
            "location": "Block B, Room 101",
        }
        fields.update(overrides)
        return IssueRepository(db, owner).create(**fields)
    return _make


def auth_header(user: User) -> dict:
    """Return an Authorization header dict for ``user``."""
    return {"Authorization": f"Bearer {make_tokens(user.email)['access_token']}"}


@pytest.fixture
def admin_header() -> dict:
    return {"X-Admin-Session": AdminSession.start("college_admin_test").encode()}
