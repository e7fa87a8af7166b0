"""Database session management.

Provides a cached engine and session factory per SQLite file, configured
for use from FastAPI's threadpool.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nexius.core.config import DEFAULT_DB_PATH
from nexius.db.schema import Base

# Module-level engine cache for connection pooling
_engine_cache: dict[str, Engine] = {}

# Module-level session factory cache
_session_factory_cache: dict[str, sessionmaker] = {}


def _cache_key(db_path: Path | None) -> tuple[Path, str]:
    path = Path(db_path) if db_path is not None else DEFAULT_DB_PATH
    return path, str(path.resolve())


def get_engine(db_path: Path | None = None) -> Engine:
    """Get SQLAlchemy engine for the database.

    Engines are cached by resolved db_path, so repeated calls with the
    same path share one connection pool.

    Args:
        db_path: Path to SQLite database file. Defaults to data/nexius.db.

    Returns:
        SQLAlchemy engine instance (cached).
    """
    path, key = _cache_key(db_path)

    if key in _engine_cache:
        return _engine_cache[key]

    path.parent.mkdir(parents=True, exist_ok=True)

    # check_same_thread=False + StaticPool: one connection shared across
    # the request threadpool
    engine = create_engine(
        f"sqlite:///{path}",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _engine_cache[key] = engine

    return engine


def _get_session_factory(db_path: Path | None = None) -> sessionmaker:
    path, key = _cache_key(db_path)

    if key in _session_factory_cache:
        return _session_factory_cache[key]

    factory = sessionmaker(bind=get_engine(path))
    _session_factory_cache[key] = factory

    return factory


def get_session(db_path: Path | None = None) -> Session:
    """Get a database session.

    Caller is responsible for closing the session.
    """
    return _get_session_factory(db_path)()


@contextmanager
def session_scope(db_path: Path | None = None) -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic cleanup.

    Commits on successful exit, rolls back on exception, and always
    closes the session.

    Example:
        with session_scope() as session:
            session.add(record)
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | None = None) -> None:
    """Create all tables if they do not exist."""
    Base.metadata.create_all(get_engine(db_path))
