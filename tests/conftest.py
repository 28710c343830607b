"""
Test Configuration
==================

Pytest fixtures for BuzzPulse: an in-memory SQLite database shared by every
session, a manually driven clock, and a FastAPI TestClient wired to both.
"""

import os

# must be set before buzzpulse.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""
os.environ.setdefault("LOG_LEVEL", "INFO")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from buzzpulse.core.clock import FixedClock, get_clock
from buzzpulse.core.db import get_db
from buzzpulse.core.init_db import init_db
from buzzpulse.core.pulse_config import PulseSettings, get_settings
from buzzpulse.services.pulse_store import PulseStore

# 2025-10-09 09:30:00 UTC, half way through an hour bucket
T0 = 1760002200

ENG_QUAD_BBOX = (-122.18, 37.42, -122.16, 37.44)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def settings():
    return PulseSettings()


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def store(db_session, settings):
    return PulseStore(db_session, settings)


@pytest.fixture
def client(session_factory, settings, clock):
    from buzzpulse.main import app

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_device(client, clock):
    """Factory for registered, signing PulseClients sharing the test clock."""
    from buzzpulse.client import PulseClient

    def _make():
        device = PulseClient(client, clock=clock)
        device.ensure_device()
        return device

    return _make
