"""
Pytest configuration and fixtures for storefront tests.
"""
import os

import pytest

# Set test environment before importing app modules
os.environ["POSTGRES_DSN"] = "sqlite://"
os.environ["TELEMETRY_SINK"] = "log"
os.environ["JWT_SECRET"] = "test-secret-key-for-unit-tests-only"
os.environ["RECOMMENDATION_ENGINE"] = "category"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from storefront.api.deps import get_db, get_telemetry  # noqa: E402
from storefront.core.telemetry import TelemetryProvider  # noqa: E402
from storefront.db.sample_data import seed  # noqa: E402
from storefront.db.session import Base  # noqa: E402
from storefront.main import app  # noqa: E402


class RecordingTelemetry(TelemetryProvider):
    def __init__(self):
        self.traces = []
        self.events = []
        self.exceptions = []

    def track_trace(self, message):
        self.traces.append(message)

    def track_event(self, name, properties=None, measurements=None):
        self.events.append((name, properties, measurements))

    def track_exception(self, exc):
        self.exceptions.append(exc)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db):
    """Sample categories, products, stores and the FREE promo."""
    seed(db)
    return db


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture
def client(session_factory, telemetry):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_telemetry] = lambda: telemetry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

