"""
Treble API — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the explicit dependencies (settings, moderation
       filter, database, pattern service), stores them on `app.state`, and
       wires middleware, exception handlers and routes.
Who:   uvicorn imports `treble_api.main:app`; tests call create_app() with
       their own settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌────────────┐ │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│    CORS    │ │
    │  └──────────┘ └──────────┘ └──────┘ └─────┬──────┘ │
    │                               ┌───────────▼──────┐ │
    │                               │ Unhandled errors │ │
    │                               └──────────────────┘ │
    │                                                     │
    │  Routes ({prefix} = API_PREFIX, default /api):      │
    │    GET {prefix}/  GET {prefix}/pattern/{slug}       │
    │    GET {prefix}/search  POST {prefix}/upload        │
    │    POST {prefix}/like/{slug}  GET /health           │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ ValidationError→400 │ NotFound→404 │ DB→500  │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    create_app():  load blocked terms (fatal on failure), build engine
    Startup:       configure logging, probe the database (log, never abort)
    Shutdown:      dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from treble_api import __version__
from treble_api.config import Settings, settings as default_settings
from treble_api.database import Database
from treble_api.exceptions import (
    DatabaseError,
    NotFoundError,
    TrebleError,
    ValidationError,
)
from treble_api.middleware.errors import UnhandledErrorMiddleware, server_error_response
from treble_api.middleware.logging import RequestLoggingMiddleware
from treble_api.middleware.request_id import RequestIDMiddleware, request_id_var
from treble_api.routes import health, patterns
from treble_api.services.moderation import ModerationFilter
from treble_api.services.pattern_service import PatternService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then a database probe. An unreachable database is
    logged but does not stop the server; requests fail with 500 until
    it comes back.
    Shutdown: close pooled connections.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Treble API starting up...")
    logger.info("Moderation filter ready with %d blocked terms", len(app.state.moderation))

    if await app.state.database.ping():
        logger.info("Successfully connected to the database.")
    else:
        logger.error("Database connection failed at startup; serving anyway.")

    logger.info(
        "Server ready at http://%s:%d%s/",
        app_settings.backend_host,
        app_settings.backend_port,
        app_settings.api_prefix,
    )
    logger.info("=" * 60)

    yield

    logger.info("Treble API shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and a single JSON error shape.

    Handler hierarchy:
        ValidationError         → 400 (includes DuplicateSlugError)
        RequestValidationError  → 400 (body/query schema violations)
        NotFoundError           → 404
        DatabaseError           → 500, generic message
        TrebleError (base)      → 500, generic message
        Exception (fallback)    → 500, generic message, stack trace logged
                                  (UnhandledErrorMiddleware catches route errors
                                  first so CORS and X-Request-ID still apply)

    Internal details (driver errors, SQL, stack traces) never reach the
    response body; they are logged with the request ID.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Schema violations are reported as 400 like every other input error."""
        rid = request_id_var.get("")
        names = set()
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
            names.add(".".join(loc) or "body")
        fields = sorted(names)
        logger.warning("[%s] Request validation failed: %s", rid, fields)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": f"Missing or invalid field(s): {', '.join(fields)}",
                "details": {"fields": fields},
                "request_id": rid,
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
                "request_id": rid,
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
                "message": "Server error",
                "request_id": rid,
            },
        )

    @app.exception_handler(TrebleError)
    async def handle_treble_error(request: Request, exc: TrebleError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "Server error",
                "request_id": rid,
            },
        )

    # Last resort for failures inside the middleware chain itself; errors
    # from routes are converted earlier by UnhandledErrorMiddleware
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return server_error_response()


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    *,
    moderation: Optional[ModerationFilter] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment-loaded ones)
        moderation:   Prebuilt filter; otherwise loaded from blocked_terms_path
        database:     Prebuilt Database; otherwise built from database_url

    Raises:
        WordListError: the blocked-term file could not be read. The app is
        not created, so the process does not start without moderation.
    """
    app_settings = app_settings or default_settings

    if moderation is None:
        moderation = ModerationFilter.from_file(app_settings.blocked_terms_path)
    if database is None:
        database = Database.from_settings(app_settings)

    app = FastAPI(
        title="Treble API",
        description=(
            "Pattern-sharing backend: upload pattern metadata, fetch by slug, "
            "search by name, author or description, and like patterns."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.moderation = moderation
    app.state.database = database
    app.state.pattern_service = PatternService(moderation)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip → CORS → Errors

    app.add_middleware(UnhandledErrorMiddleware)

    # Explicit origin allow-list; no credentials. Preflights are answered
    # here and never reach a route handler.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Request-ID"],
        max_age=86400,
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(patterns.router, prefix=app_settings.api_prefix)
    app.include_router(health.router)

    return app


# uvicorn expects `treble_api.main:app` to be importable
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "treble_api.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
    )
