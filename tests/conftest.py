"""Shared pytest fixtures for nexius tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from nexius.core.config import Settings
from nexius.db.schema import Base

TEST_API_KEY = "test-api-key"


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    with Session(engine) as session:
        yield session


@pytest.fixture
def settings(tmp_path):
    """Settings with a known API key."""
    return Settings(api_key=TEST_API_KEY, db_path=tmp_path / "unused.db")


@pytest.fixture
def client(engine, settings):
    """Test client whose requests use the in-memory database."""
    from nexius.api.app import create_app
    from nexius.api.deps import get_db_session

    app = create_app(settings)

    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Headers carrying the test API key."""
    return {"x-api-key": TEST_API_KEY}


@pytest.fixture
def api_key():
    """The API key the test app is configured with."""
    return TEST_API_KEY
