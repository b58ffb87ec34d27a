"""
Shared fixtures for the registration service tests.

Settings are read at import time, so the environment is prepared here before
any `app.*` module is imported. Tests run against an in-memory SQLite database
(one shared connection via StaticPool) and in-process fakes for the image host
and the sheet mirror; nothing touches the network.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("IMGBB_API_KEY", "test-imgbb-key")
os.environ.setdefault("GOOGLE_SERVICE_ACCOUNT_KEY", "")
os.environ.setdefault("GOOGLE_SHEET_ID", "")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.rate_limit import MemoryWindowLimiter
from app.db.session import Base, get_db
from app.models.registration import Registration  # noqa: F401
from tests.helpers import FakeImageStore, FakeMirror


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def mirror() -> FakeMirror:
    return FakeMirror()


@pytest.fixture
def limiter() -> MemoryWindowLimiter:
    return MemoryWindowLimiter(limit=5, window=15 * 60)


@pytest.fixture
def client(session_factory, image_store, mirror, limiter):
    from app.api import deps
    from app.main import app

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_image_store] = lambda: image_store
    app.dependency_overrides[deps.get_sheet_mirror] = lambda: mirror
    app.dependency_overrides[deps.get_admission_policy] = lambda: limiter
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()
