# tests/conftest.py

import os

# Must be set before anything from eventify is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REMINDER_SCHEDULER_ENABLED"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventify.main import app
from eventify.database import Base, get_db
from eventify.cryptography import encrypt_password, create_access_token
from eventify.models.user_model import User
from eventify.models.event_model import Event
from eventify.models.room_model import Room

TEST_PASSWORD = "Password1"
TEST_PASSWORD_HASH = encrypt_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def smtp(monkeypatch):
    """Replaces the SMTP client; tests inspect smtp.return_value for sent mail."""
    smtp_mock = MagicMock()
    monkeypatch.setattr("eventify.controller.mailer.smtplib.SMTP", smtp_mock)
    return smtp_mock


@pytest.fixture(scope="function")
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(email=None, role="student", **fields):
        counter["n"] += 1
        profile = {
            "display_name": f"Student {counter['n']}",
            "student_id": f"S{1000 + counter['n']}",
            "session": "2024-2025",
        }
        profile.update(fields)
        user = User(
            email=email or f"user{counter['n']}@uni.edu",
            password=TEST_PASSWORD_HASH,
            role=role,
            **profile,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_event(db):
    def _make_event(title="Tech Talk", start_in=timedelta(days=3), duration=timedelta(hours=2), **fields):
        start_at = fields.pop("start_at", None) or datetime.utcnow().replace(microsecond=0) + start_in
        event = Event(
            title=title,
            start_at=start_at,
            end_at=fields.pop("end_at", None) or start_at + duration,
            **fields,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event


@pytest.fixture
def make_room(db):
    def _make_room(name="Main Hall", capacity=100, **fields):
        room = Room(name=name, capacity=capacity, **fields)
        db.add(room)
        db.commit()
        db.refresh(room)
        return room

    return _make_room


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def student(make_user):
    return make_user(email="student@uni.edu")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@uni.edu", role="admin", display_name="Admin")
