"""
Spacetime API — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error handling
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Served by uvicorn (`uvicorn spacetime.main:app` or `spacetime-api`).

Application Architecture:
    Middleware:   Request ID → Logging → CORS
    Routes:       /memories (bearer token required), /health
    Errors:       Authentication→401 │ AccessDenied→401 (empty)
                  RequestValidation→400 │ NotFound→404 │ Database→500

Lifecycle:
    Startup:   configure logging, warn about development secrets
    Shutdown:  dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from spacetime import __version__
from spacetime.config import settings
from spacetime.database import dispose_engine
from spacetime.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    SpacetimeError,
)
from spacetime.middleware.logging import RequestLoggingMiddleware
from spacetime.middleware.request_id import RequestIDMiddleware, request_id_var
from spacetime.routes import health, memories
from spacetime.security import authenticate_request

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Spacetime API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Still serve: local development runs with the defaults
        logger.warning("%s", str(e))

    logger.info("HTTP server running on http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Spacetime API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler table:
        AuthenticationError     → 401 JSON + WWW-Authenticate
        AccessDeniedError       → 401, empty body
        RequestValidationError  → 400 (FastAPI path/body schema failures),
                                  or 401 when a memory route lacks a valid token
        NotFoundError           → 404
        DatabaseError           → 500, generic message
        SpacetimeError (base)   → 500
        Exception (fallback)    → 500

    Internal details (stack traces, SQL, context dicts of server errors)
    are logged, never returned.
    """

    def unauthorized_response(exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthorized",
                "message": exc.message,
                "requestId": request_id_var.get(""),
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return unauthorized_response(exc)

    @app.exception_handler(AccessDeniedError)
    async def handle_access_denied(request: Request, exc: AccessDeniedError):
        # Empty body: no hint about the memory or its owner
        return Response(status_code=401)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Undecodable JSON is rejected before dependencies run; check the token first
        if request.url.path.startswith(memories.MEMORIES_PATH):
            try:
                await authenticate_request(request)
            except AuthenticationError as auth_exc:
                return unauthorized_response(auth_exc)

        rid = request_id_var.get("")
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
                "requestId": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "requestId": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "requestId": rid,
            },
        )

    @app.exception_handler(SpacetimeError)
    async def handle_application_error(request: Request, exc: SpacetimeError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "requestId": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "requestId": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    A fresh instance per call, so tests can build isolated apps.
    """
    app = FastAPI(
        title="Spacetime API",
        description="Store and browse short memories with a cover image.",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → routes
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(memories.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured socket."""
    uvicorn.run(
        "spacetime.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
