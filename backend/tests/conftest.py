"""
Shared fixtures for the test suite.
"""
import os
import tempfile

# Keep the app away from real storage and background jobs during tests
os.environ.setdefault("BALANCE_DATABASE_URL", "sqlite://")
os.environ.setdefault("BALANCE_LOG_DIR", tempfile.mkdtemp(prefix="balance-logs-"))
os.environ.setdefault("BALANCE_SCHEDULER_ENABLED", "false")

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.auth import API_KEY
from backend.database import Base, get_db
from backend.models import User


@pytest.fixture
def engine():
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
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def now():
    """Fixed wall clock: Monday 2024-06-10 15:00 local time"""
    return datetime(2024, 6, 10, 15, 0, 0)


@pytest.fixture
def user(db_session):
    user = User(name="Test User", email="test@example.com", weekly_goal=40)
    user.set_streak_history([])
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user



@pytest.fixture
def client(db_session):
    """API client sharing the test session"""
    from fastapi.testclient import TestClient
    from backend.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user):
    return {"X-API-Key": API_KEY, "X-User-Id": str(user.id)}
