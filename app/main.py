"""FastAPI application entry point for the survey collection service.

This module builds the FastAPI application, wires the stores and the
identity resolver created at startup, registers routers, and converts
errors into JSON responses.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.logging_config import setup_logging, get_logger
from app.middleware.identity import CallerIdentityResolver
from app.middleware.request_context import request_context_middleware
from app.models import (
    Base,
    create_connection_lock,
    create_db_engine,
    create_session_factory,
)
from app.routes import health, responses, surveys
from app.routes.common import error_response
from app.services.response_store import ResponseStore
from app.services.survey_store import SurveyStore

VERSION = "1.0.0"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup:
    - Configure logging
    - Create the database engine, tables and session factory
    - Create the survey and response stores (one per process)

    Shutdown:
    - Dispose of the engine's connection pool

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    settings: Settings = app.state.settings
    setup_logging(settings)

    engine = create_db_engine(settings)
    Base.metadata.create_all(engine)
    session_factory = create_session_factory(engine)
    lock = create_connection_lock(engine)

    app.state.survey_store = SurveyStore(session_factory, lock)
    app.state.response_store = ResponseStore(session_factory, lock)

    logger.info(
        f"Survey service starting - "
        f"Environment: {settings.environment}, "
        f"Log Level: {settings.log_level}, "
        f"Identity: {settings.identity_mode.value}, "
        f"Database: {engine.url.render_as_string(hide_password=True)}, "
        f"Version: {settings.git_commit_sha}"
    )

    yield

    logger.info("Survey service shutting down")
    engine.dispose()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors raised by dependencies as ``{"message": ...}``."""
    response = error_response(request, exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed request bodies with 400."""
    logger.warning(f"Invalid request body for {request.method} {request.url.path}")
    return error_response(
        request, 400, "Invalid request body",
        errors=jsonable_encoder(exc.errors()),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions.

    Logs the exception and returns a 500 response that carries the
    exception message.

    Args:
        request: FastAPI request object
        exc: Exception that was raised

    Returns:
        JSONResponse: 500 error response
    """
    logger.error(
        f"Unhandled exception for {request.method} {request.url}: {exc}",
        exc_info=True
    )
    return error_response(request, 500, "Internal server error", error=str(exc))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to run with (defaults to get_settings())

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()

    application = FastAPI(
        title="Survey Collection API",
        description="Create surveys, collect responses and report aggregated results",
        version=VERSION,
        lifespan=lifespan
    )
    application.state.settings = settings
    application.state.identity_resolver = CallerIdentityResolver(settings)

    @application.get("/")
    async def root() -> dict:
        """Root endpoint with basic API information."""
        return {
            "service": "Survey Collection API",
            "version": VERSION,
            "environment": settings.environment,
            "status": "operational"
        }

    application.include_router(health.router, tags=["Health"])
    application.include_router(surveys.router, tags=["Surveys"])
    application.include_router(responses.router, tags=["Responses"])

    application.middleware("http")(request_context_middleware)

    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(Exception, global_exception_handler)

    return application


app = create_app()
