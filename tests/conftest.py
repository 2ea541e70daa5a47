import os

# Settings are read at import time; keep the app off PostgreSQL and Firebase
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("GOOGLE_APPLICATION_CREDENTIALS", "/nonexistent/firebase.json")

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.rate_limit import limiter
from app.core.security import create_access_token, get_password_hash
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.services.location_service import location_service
from app.services.message_service import message_service
from app.services.restaurant_service import restaurant_service
from app.services.social_service import social_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def disable_rate_limits():
    limiter.enabled = False
    try:
        yield
    finally:
        limiter.enabled = True


@pytest.fixture(autouse=True)
def notifier(monkeypatch):
    """Captures socket/push fan-out instead of scheduling it"""
    mock = MagicMock()
    for service in (social_service, message_service, location_service):
        monkeypatch.setattr(service, "notifier", mock)
    return mock


@pytest.fixture(autouse=True)
def storage(monkeypatch):
    mock = MagicMock()
    mock.delete_images.return_value = 0
    mock.delete_folder.return_value = 0
    for service in (location_service, restaurant_service):
        monkeypatch.setattr(service, "storage", mock)
    return mock


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name=None, email=None, password="secret123"):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=email or f"user{n}@example.com",
            password_hash=get_password_hash(password),
            name=name or f"User {n}",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


def emitted(notifier, event):
    """(user_ids, payload) for every emit_to_users call with the given event"""
    return [
        (list(c.args[0]), c.args[2])
        for c in notifier.emit_to_users.call_args_list
        if c.args[1] == event
    ]
