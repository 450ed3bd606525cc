"""Database engine and session helpers for restwell."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import Engine
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker

from restwell.core.config import get_settings
from restwell.db.models import Base


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Create the process-wide engine from settings on first use."""
    database_url = get_settings().database_url
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def build_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """Session factory with the options every restwell session uses."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        class_=Session,
    )


@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker[Session]:
    return build_sessionmaker(get_engine())


def init_db(engine: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine if engine is not None else get_engine())


def get_db_session() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    session = get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional session scope for scripts/tests."""
    session = get_sessionmaker()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
