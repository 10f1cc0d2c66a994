import itertools
import os

# Point the app at a throwaway in-memory database before anything imports settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEFAULT_DATA"] = "false"

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from app.core import security
from app.core.config import settings
from app.db.base import Base
from app.db.init_db import init_db
from app.db.models.user import User
from app.db.session import SessionLocal, engine
from app.main import app

# PBKDF2 at full iterations; hash once for every test user.
PASSWORD = "secret123"
PASSWORD_HASH = security.hash_password(PASSWORD)


def next_month_start(today: date | None = None) -> date:
    today = today or date.today()
    return (today.replace(day=1) + timedelta(days=32)).replace(day=1)


@pytest.fixture(autouse=True)
def fresh_schema(monkeypatch):
    Base.metadata.drop_all(bind=engine)
    init_db(engine)
    security.SESSIONS.clear()
    monkeypatch.setattr(settings, "monthly_leave_allowance", 5)
    monkeypatch.setattr(settings, "reviewer_department_scope", True)
    yield
    security.SESSIONS.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role: str = "teacher", department: str = "Computer Science", name: str | None = None) -> User:
        n = next(counter)
        user = User(
            name=name or f"{role.title()} {n}",
            email=f"{role}{n}@college.edu",
            password=PASSWORD_HASH,
            role=role,
            department=department,
            employee_id=f"EMP{n:03d}",
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {security.issue_token(str(user.user_id))}"}

    return _headers


@pytest.fixture
def leave_start():
    return next_month_start()
