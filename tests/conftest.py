"""
Pytest fixtures for PosturePal tests.
"""
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from posturepal.core.database import Base, get_db
from posturepal.client.local_store import LocalStore


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def db_engine():
    """In-memory database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def client(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email="ada@example.com", password="secret123", name="Ada", **profile):
    response = client.post("/api/auth/register", json={
        "name": name, "email": email, "password": password, **profile
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def auth_headers(client):
    """Bearer header for a freshly registered account."""
    data = register(client)
    return {"Authorization": f"Bearer {data['token']}"}


def session_payload(start=None, minutes=10, good_minutes=6, scores=(80, 60, 100), issues=()):
    start = start or datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)
    end = start + timedelta(minutes=minutes)
    return {
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
        "total_time": minutes * 60,
        "good_posture_time": good_minutes * 60,
        "issues": list(issues),
        "scores": [
            {"score": score, "timestamp": (start + timedelta(seconds=2 * i)).isoformat()}
            for i, score in enumerate(scores)
        ],
    }


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest.fixture
def local_store(tmp_path):
    store = LocalStore(str(tmp_path / "posturepal-local.db"))
    yield store
    store.close()
