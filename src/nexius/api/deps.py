"""Request-scoped FastAPI dependencies shared by the routers."""

from __future__ import annotations

from typing import Generator

from fastapi import Depends, Request

from nexius.core.config import Settings
from nexius.db.repo import DbSession
from nexius.db.session import get_session


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the app was built with."""
    return request.app.state.settings


def get_db_session(
    settings: Settings = Depends(get_settings),
) -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = get_session(settings.db_path)
    try:
        yield session
    finally:
        session.close()
