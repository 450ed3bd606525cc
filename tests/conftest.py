"""Shared pytest fixtures for restwell test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared by every connection of one test."""
    from restwell.db.base import init_db

    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Provide a session bound to the test engine."""
    from restwell.db.base import build_sessionmaker

    session = build_sessionmaker(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine: Engine) -> Generator[TestClient, None, None]:
    """Provide an API test client backed by the test engine."""
    from restwell.db.base import build_sessionmaker
    from restwell.db.base import get_db_session
    from restwell.main import create_app

    factory = build_sessionmaker(engine)

    def _override_session() -> Generator[Session, None, None]:
        session = factory()
        try:
            yield session
        finally:
            session.close()

    app = create_app()
    app.dependency_overrides[get_db_session] = _override_session
    # No context manager: the startup hook would create tables on the configured database.
    yield TestClient(app)
