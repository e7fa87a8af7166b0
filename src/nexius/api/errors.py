"""API error taxonomy.

Every failure leaves the API as {"error": <message>} (plus "details" when
there is something useful to show), never as a stack trace.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# Client-facing messages
MSG_INTERNAL_ERROR = "Error interno del servidor"
MSG_UNAUTHORIZED = "Unauthorized"
MSG_API_KEY_NOT_CONFIGURED = "Server API key not configured"
MSG_BLOG_POST_NOT_FOUND = "Artículo no encontrado"
MSG_PROMOTION_NOT_FOUND = "Promoción no encontrada"
MSG_TEAM_MEMBER_NOT_FOUND = "Miembro del equipo no encontrado"
MSG_LICENSE_NOT_FOUND = "License not found"
MSG_INVALID_PAYLOAD = "Invalid payload"


class ApiError(Exception):
    """Base exception for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, details: Any = None, status_code: int | None = None):
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = jsonable_encoder(self.details)
        return body


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = MSG_UNAUTHORIZED, **kwargs: Any):
        super().__init__(message, **kwargs)


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


class PayloadTooLargeError(ApiError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class ServerMisconfiguredError(ApiError):
    """Raised when the server secret needed to check a request is missing."""

    def __init__(self, message: str = MSG_API_KEY_NOT_CONFIGURED, **kwargs: Any):
        super().__init__(message, **kwargs)


class InternalServerError(ApiError):
    """Generic 500; the cause is logged, never sent to the client."""

    def __init__(self, message: str = MSG_INTERNAL_ERROR, **kwargs: Any):
        super().__init__(message, **kwargs)


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": MSG_INVALID_PAYLOAD, "details": jsonable_encoder(exc.errors())},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": MSG_INTERNAL_ERROR},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers that render errors as {"error": ...} bodies."""
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
