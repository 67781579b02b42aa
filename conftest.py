"""
Shared fixtures: in-memory SQLite database, API client and bearer tokens.
"""

import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_URL"] = "memory://"
os.environ["SCHEDULER_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.security import jwt_manager
from app.models import Video
from main import app


def auth_headers(user_id: str, username: str = None) -> dict:
    token = jwt_manager.create_access_token(user_id, username=username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def alice():
    return auth_headers("user-alice", "alice")


@pytest.fixture
def bob():
    return auth_headers("user-bob", "bob")


@pytest.fixture
def video(db):
    video = Video(title="Sunset timelapse", duration=100)
    db.add(video)
    db.commit()
    db.refresh(video)
    return video
