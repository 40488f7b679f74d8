"""Shared fixtures.

The environment is pinned before anything from ``fintrack`` is imported, since
settings and the default engine are built at import time. API tests never use
that engine: ``get_session`` is overridden with a session on a per-test
in-memory SQLite database (``StaticPool`` keeps the single connection alive).
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_JSON", "false")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from fintrack.core.jwt import create_access_token
from fintrack.core.security import hash_password
from fintrack.database import get_session, init_db
from fintrack.main import app
from fintrack.models.user import User
from fintrack.seed import seed_default_categories
from tests.helpers.memory_store import InMemoryTransactionStore


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def other_user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def _get_session():
        return session

    app.dependency_overrides[get_session] = _get_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    """Create a user with the default categories; returns (user, auth headers)."""

    def _make(email: str = "alice@example.com", password: str = "secret123"):
        user = User(email=email, hashed_password=hash_password(password))
        session.add(user)
        session.commit()
        session.refresh(user)
        seed_default_categories(session, user.id)
        session.refresh(user)
        token = create_access_token({"sub": str(user.id), "email": user.email})
        return user, {"Authorization": f"Bearer {token}"}

    return _make
