"""API-key authentication.

Callers authenticate with `x-api-key: <secret>` or
`Authorization: Bearer <secret>`. The secret is injected into an
ApiKeyValidator when the app is built; the module-level helpers fall back
to NEXIUS_API_KEY for scripts that have no app.
"""

from __future__ import annotations

import logging
import os
import re
import secrets
from dataclasses import dataclass
from typing import Mapping

from fastapi import Depends, Request, status

from nexius.api.errors import (
    MSG_API_KEY_NOT_CONFIGURED,
    MSG_UNAUTHORIZED,
    ServerMisconfiguredError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

API_KEY_ENV = "NEXIUS_API_KEY"
API_KEY_HEADER = "x-api-key"

_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


@dataclass(frozen=True)
class AuthVerdict:
    """Result of an API-key check.

    status and body are only set on failure and are what the handler
    should answer with.
    """

    ok: bool
    status: int | None = None
    body: dict[str, str] | None = None


AUTH_OK = AuthVerdict(ok=True)


def _candidate_from_headers(headers: Mapping[str, str]) -> str | None:
    # Starlette headers are case-insensitive already; plain dicts are not
    lowered = {k.lower(): v for k, v in headers.items()}
    provided = lowered.get(API_KEY_HEADER)
    if provided:
        return provided
    authorization = lowered.get("authorization")
    if authorization:
        return _BEARER_PREFIX.sub("", authorization)
    return None


class ApiKeyValidator:
    """Checks caller-supplied keys against one server secret."""

    def __init__(self, server_key: str):
        self._server_key = server_key or ""

    @property
    def configured(self) -> bool:
        return bool(self._server_key)

    def require_api_key(self, provided: str | None) -> AuthVerdict:
        """Validate a caller-supplied key.

        Args:
            provided: Key sent by the caller, or None.

        Returns:
            AUTH_OK, a 500 verdict when no server secret is configured, or
            a 401 verdict when the key is missing or wrong.
        """
        if not self._server_key:
            return AuthVerdict(
                ok=False,
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
                body={"error": MSG_API_KEY_NOT_CONFIGURED},
            )

        if not provided or not secrets.compare_digest(
            provided.encode("utf-8"), self._server_key.encode("utf-8")
        ):
            return AuthVerdict(
                ok=False,
                status=status.HTTP_401_UNAUTHORIZED,
                body={"error": MSG_UNAUTHORIZED},
            )

        return AUTH_OK

    def require_api_key_from_headers(self, headers: Mapping[str, str]) -> AuthVerdict:
        """Validate the key carried by x-api-key or Authorization: Bearer."""
        return self.require_api_key(_candidate_from_headers(headers))


def get_server_api_key() -> str:
    """Read the server secret from the environment ("" when unset)."""
    return os.environ.get(API_KEY_ENV, "")


def require_api_key(provided: str | None, *, server_key: str | None = None) -> AuthVerdict:
    """Validate a key against server_key, or NEXIUS_API_KEY when omitted."""
    if server_key is None:
        server_key = get_server_api_key()
    return ApiKeyValidator(server_key).require_api_key(provided)


def require_api_key_from_headers(
    headers: Mapping[str, str], *, server_key: str | None = None
) -> AuthVerdict:
    """Validate request headers against server_key, or NEXIUS_API_KEY when omitted."""
    if server_key is None:
        server_key = get_server_api_key()
    return ApiKeyValidator(server_key).require_api_key_from_headers(headers)


# ============================================================================
# FastAPI dependencies
# ============================================================================


def get_api_key_validator(request: Request) -> ApiKeyValidator:
    """Dependency returning the validator built by create_app."""
    return request.app.state.api_key_validator


def verify_api_key(
    request: Request,
    validator: ApiKeyValidator = Depends(get_api_key_validator),
) -> None:
    """Dependency that rejects requests without a valid API key.

    Raises:
        ServerMisconfiguredError: If no server secret is configured.
        UnauthorizedError: If the key is missing or wrong.
    """
    verdict = validator.require_api_key_from_headers(request.headers)
    if verdict.ok:
        return

    if verdict.status == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Rejecting %s %s: %s is not set", request.method, request.url.path, API_KEY_ENV
        )
        raise ServerMisconfiguredError()

    logger.warning("Rejecting %s %s: missing or invalid API key", request.method, request.url.path)
    raise UnauthorizedError()
