# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Shared fixtures.

Settings are read at import time, so the environment is set up before any
application module is imported.  Every test gets a fresh in-memory SQLite
database; ``get_db`` is overridden to hand out sessions bound to it.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production-use-0123456789"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"

import pytest                                   # noqa: E402
from fastapi.testclient import TestClient       # noqa: E402
from sqlalchemy import create_engine            # noqa: E402
from sqlalchemy.orm import sessionmaker         # noqa: E402
from sqlalchemy.pool import StaticPool          # noqa: E402

from core.security import create_access_token, hash_password  # noqa: E402
from database import Base, get_db               # noqa: E402
from main import app                            # noqa: E402
from models.student import Student              # noqa: E402
from models.user import User                    # noqa: E402

PASSWORD = "Passw0rd!"


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


def create_user(db, email, role="user", password=PASSWORD, first_name="Test", last_name="User", is_active=True):
    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token({"sub": user.email, "user_id": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_user(db):
    return create_user(db, "admin@esisa.ac.ma", role="admin", first_name="Admin", last_name="Account")


@pytest.fixture()
def regular_user(db):
    return create_user(db, "user@esisa.ac.ma", first_name="Regular", last_name="User")


@pytest.fixture()
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture()
def user_headers(regular_user):
    return auth_headers(regular_user)


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------


@pytest.fixture()
def student_payload():
    """Factory for a valid POST /students body; keyword args override fields."""

    def _make(**overrides):
        body = {
            "student_id": "ESISA-2024-001",
            "first_name": "Ahmed",
            "last_name": "Benali",
            "email": "ahmed.benali@student.esisa.ac.ma",
            "date_of_birth": "2000-05-15",
            "gender": "male",
            "city": "Fes",
            "country": "Morocco",
            "program": "Computer Science",
            "year": 3,
            "gpa": 3.7,
        }
        body.update(overrides)
        return body

    return _make


def insert_students(db, count, creator=None, **fields):
    """Insert *count* students directly; ``n`` in string fields is the index."""
    rows = []
    for n in range(count):
        values = {
            "student_id": f"STU-{n:04d}",
            "first_name": f"First{n}",
            "last_name": f"Last{n}",
            "email": f"student{n}@student.esisa.ac.ma",
            "program": "Computer Science",
            "year": 1,
            "status": "active",
        }
        values.update(fields)
        rows.append(Student(created_by_id=creator.id if creator else None, **values))
    db.add_all(rows)
    db.commit()
    return rows
