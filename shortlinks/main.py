"""Main application module.

This module initializes the FastAPI application, includes routes,
and configures middleware and exception handlers.
"""

import asyncio
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlinks.api import api_router
from shortlinks.api.validation import describe_issue
from shortlinks.core.alembic import run_migrations
from shortlinks.core.config import settings
from shortlinks.core.logging import setup_logging
from shortlinks.core.telemetry import instrument_engine, setup_telemetry
from shortlinks.db.base import engine
from shortlinks.middleware import RequestLoggingMiddleware, TracingMiddleware

# Setup logging and telemetry
logger = setup_logging()
setup_telemetry()
instrument_engine(engine)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(TracingMiddleware)

if settings.REQUEST_LOGGING_ENABLED:
    app.add_middleware(RequestLoggingMiddleware)

# Include API router
app.include_router(api_router)


def error_envelope(status_code: int, error: str, **extra) -> JSONResponse:
    """Build the ``{"success": false, "error": ...}`` body used for every failure."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **extra},
    )


# Add exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = error_envelope(exc.status_code, str(exc.detail))
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests (bad JSON, bad path params) in the envelope."""
    errors = exc.errors()
    logger.info(f"Request validation error on {request.method} {request.url.path}")
    message = describe_issue(errors[0]) if errors else "invalid request"
    return error_envelope(400, f"Validation failed: {message}")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to catch and log all unhandled exceptions."""
    error_id = f"error-{uuid.uuid4().hex}"

    logger.opt(exception=exc).error(
        "Unhandled exception in {method} {path}",
        method=request.method,
        path=request.url.path,
        error_id=error_id,
    )

    return error_envelope(500, "Internal server error", error_id=error_id)


# Add startup and shutdown event handlers
@app.on_event("startup")
async def startup_event():
    """Run startup tasks."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Applying database migrations")
        await asyncio.to_thread(run_migrations)


@app.on_event("shutdown")
async def shutdown_event():
    """Run cleanup tasks."""
    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()
