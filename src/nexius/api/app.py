"""FastAPI application factory.

API layer:
- Extracts path/query params, calls one data-access function per request
- Maps results to JSON and failures to {"error": ...} bodies
- Forbidden: SQL, payment-code generation, ingestion rules
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nexius import __version__
from nexius.api.auth import ApiKeyValidator
from nexius.api.errors import register_error_handlers
from nexius.core.config import Settings
from nexius.db.session import init_db

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        settings: Service settings. Read from the environment when omitted.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_db(settings.db_path)
        if not app.state.api_key_validator.configured:
            logger.warning("NEXIUS_API_KEY is not set; API-key protected routes will answer 500")
        logger.info("Nexius API started (db=%s)", settings.db_path)
        yield

    app = FastAPI(
        title="Nexius API",
        description="Blog, promotions, licenses, team and transactions for the Nexius dashboard",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.api_key_validator = ApiKeyValidator(settings.api_key)

    # Add CORS middleware for the dashboard frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Include routes
    from nexius.api.routes import blog, licenses, promotions, team, transactions

    app.include_router(blog.router, prefix="/api")
    app.include_router(promotions.router, prefix="/api")
    app.include_router(licenses.router, prefix="/api")
    app.include_router(team.router, prefix="/api")
    app.include_router(transactions.router, prefix="/api")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


def main() -> None:
    """Run the API with uvicorn (console entry point)."""
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000, log_level=settings.log_level.lower())


# Default app instance
app = create_app()
