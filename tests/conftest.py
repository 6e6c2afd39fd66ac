"""Pytest configuration for POSTCREDIT tests.

Shared fixtures: an in-memory SQLite engine with all tables, a session bound
to it, a client/record factory, and a FastAPI TestClient wired to that session.
"""

import os

# Must be set before postcredit.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from postcredit.database import get_session
from postcredit.main import app
from postcredit.models.source_models import AttributionSettings, Client


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def api(session):
    """TestClient whose requests use the test session."""

    def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(session):
    def _make(client_id="client-1", window_days=None, soft=None):
        session.add(Client(id=client_id, name=client_id.title()))
        if window_days is not None or soft is not None:
            session.add(
                AttributionSettings(
                    client_id=client_id,
                    attribution_window_days=window_days or 7,
                    use_soft_attribution=True if soft is None else soft,
                )
            )
        session.commit()
        return client_id

    return _make


@pytest.fixture
def add(session):
    """Persist records and commit."""

    def _add(*records):
        for record in records:
            session.add(record)
        session.commit()

    return _add
