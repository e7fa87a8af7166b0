"""Service settings.

Read once from the environment and injected into the app factory, so
tests can build an app with any API key or database path.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_DB_PATH = Path("data/nexius.db")
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the API."""

    api_key: str = ""
    db_path: Path = DEFAULT_DB_PATH
    payment_code_ttl_minutes: int = 30
    payment_code_length: int = 6
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Settings instance.

        Raises:
            ValueError: If a numeric variable is not an integer.
        """
        if environ is None:
            environ = os.environ

        origins_raw = environ.get("NEXIUS_CORS_ORIGINS")
        if origins_raw:
            cors_origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())
        else:
            cors_origins = DEFAULT_CORS_ORIGINS

        return cls(
            api_key=environ.get("NEXIUS_API_KEY", ""),
            db_path=Path(environ.get("NEXIUS_DB_PATH", str(DEFAULT_DB_PATH))),
            payment_code_ttl_minutes=_read_int(environ, "NEXIUS_PAYMENT_CODE_TTL_MINUTES", 30),
            payment_code_length=_read_int(environ, "NEXIUS_PAYMENT_CODE_LENGTH", 6),
            log_level=environ.get("NEXIUS_LOG_LEVEL", "INFO").upper(),
            cors_origins=cors_origins,
        )
