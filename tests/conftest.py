"""Shared fixtures: in-memory database, API client and seeded users/trips."""

from __future__ import annotations

import os
import tempfile
from datetime import timedelta

# Settings are read at import time; configure before the app is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "100000"
os.environ["ALLOWED_EMAIL_DOMAIN"] = ""
os.environ["LOG_PATH"] = os.path.join(tempfile.gettempdir(), "hopalong-tests", "api.log")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.User import User, initials_from_name
from services import trips as trip_service
from utils.dates import utc_now
from utils.security import create_access_token, hash_password

PASSWORD = "password123"
PASSWORD_HASH = hash_password(PASSWORD)


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
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, name: str, email: str | None = None) -> User:
    user = User(
        name=name,
        email=email or f"{name.split()[0].lower()}@iitr.ac.in",
        password_hash=PASSWORD_HASH,
        branch="Computer Science",
        year="3rd Year",
        avatar=initials_from_name(name),
        bio="",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_trip(db, organizer: User, **overrides):
    start = utc_now() + timedelta(days=10)
    data = {
        "title": "Weekend in Rishikesh",
        "description": "Rafting and camping by the Ganges for the weekend.",
        "destination": "Rishikesh",
        "start_date": start,
        "end_date": start + timedelta(days=2),
        "max_participants": 4,
        "estimated_cost": 3000,
        "mode": "Bus",
        "trip_type": "Adventure",
    }
    data.update(overrides)
    return trip_service.create_trip(db, organizer, data)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def organizer(db):
    return make_user(db, "Rahul Sharma")


@pytest.fixture
def traveler(db):
    return make_user(db, "Priya Patel")


@pytest.fixture
def other_traveler(db):
    return make_user(db, "Amit Kumar")


@pytest.fixture
def trip(db, organizer):
    return make_trip(db, organizer)
