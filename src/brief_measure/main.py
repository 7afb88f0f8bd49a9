# src/brief_measure/main.py
"""Main entry point for the Brief Measure application."""

from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from brief_measure import __version__
from brief_measure.api.v1 import keys_router, observations_router, system_router
from brief_measure.core.errors import AppError, ConfigurationError, StorageError
from brief_measure.core.settings import Settings, load_settings
from brief_measure.db.session import build_engine, build_session_factory

logger = logging.getLogger(__name__)


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc)


async def _storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error during %s %s", request.method, request.url.path)
    return _error_response(StorageError())


def create_app(settings: Settings) -> FastAPI:
    """Build the FastAPI application around an explicit settings object.

    The engine and session factory are created here and kept on ``app.state``
    so request handlers never read configuration from the environment.
    """
    app = FastAPI(
        title=settings.app_name,
        description="API-key gated observation ingestion",
        version=settings.app_version,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _storage_error_handler)  # type: ignore[arg-type]

    # Include API routers
    app.include_router(keys_router, prefix="/api/v1")
    app.include_router(observations_router, prefix="/api/v1")
    app.include_router(system_router, prefix="/api/v1")

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        engine.dispose()

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app


def serve() -> None:
    """Load configuration, then run the API with uvicorn on ``BIND_ADDR``.

    Exits with status 1 if configuration is missing or invalid.
    """
    import uvicorn

    try:
        settings = load_settings()
    except ConfigurationError as err:
        logging.basicConfig(level=logging.ERROR)
        logger.error("error: %s", err.message)
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Brief Measure %s on %s", __version__, settings.bind_addr)
    uvicorn.run(create_app(settings), host=settings.bind_host, port=settings.bind_port)


if __name__ == "__main__":
    serve()
