"""
Document CRUD Gateway — FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn crud_api.main:app)
       and by tests, which pass a fake database handle.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes ({API_PREFIX}):                             │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ POST /create │ │ GET /read/.. │ │ GET /health │  │
    │  │ PUT /update/ │ │ DELETE /del..│ │             │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers (plain text bodies):            │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ NotFound→404 │ Operation→500 │ Other→500     │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, never fatal)
    3. Create the Firestore client unless a handle was injected
    Shutdown:
    1. Close the Firestore client this app created
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from crud_api import __version__
from crud_api.config import settings
from crud_api.database import close_firestore, init_firestore
from crud_api.exceptions import (
    DatabaseNotConfiguredError,
    DocumentNotFoundError,
    DocumentOperationError,
)
from crud_api.middleware.logging import RequestLoggingMiddleware
from crud_api.middleware.rate_limit import RateLimitMiddleware
from crud_api.middleware.request_id import RequestIDMiddleware, request_id_var
from crud_api.routes import documents, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (container runtimes capture it)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Chatty third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("grpc").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    A handle passed to create_app(db=...) is used as-is and never closed here;
    otherwise the Firestore client is built from settings and closed on
    shutdown. A failed initialization leaves app.state.db as None: the server
    still starts, /health reports "degraded", and CRUD routes answer 500.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Document CRUD Gateway %s starting up...", __version__)

    owns_db = False
    if app.state.db is None:
        try:
            settings.validate_required_for_production()
        except ValueError as e:
            logger.error("Configuration error: %s", str(e))

        app.state.db = init_firestore(settings)
        owns_db = app.state.db is not None
    else:
        logger.info("Using injected database handle: %s", type(app.state.db).__name__)

    logger.info("CRUD routes mounted at '%s'", settings.api_prefix or "/")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Document CRUD Gateway shutting down...")
    if owns_db:
        await close_firestore(app.state.db)
        app.state.db = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers.

    Handler hierarchy (all bodies are text/plain):
        DocumentNotFoundError       → 404 "Document not found"
        DocumentOperationError      → 500 static per-operation message
        DatabaseNotConfiguredError  → 500 "Database is not configured"
        Exception (fallback)        → 500 "Internal server error"

    Other CrudApiError subclasses fall through to the fallback. The rate
    limiter answers 429 itself, before any route or handler runs.

    Responses never contain the underlying error; it is logged server-side
    (DocumentOperationError is already logged with traceback by the service).
    """

    @app.exception_handler(DocumentNotFoundError)
    async def handle_not_found(request: Request, exc: DocumentNotFoundError):
        logger.info("[%s] Document not found: %s", request_id_var.get(""), exc.context)
        return PlainTextResponse(exc.message, status_code=404)

    @app.exception_handler(DocumentOperationError)
    async def handle_operation_error(request: Request, exc: DocumentOperationError):
        return PlainTextResponse(exc.message, status_code=500)

    @app.exception_handler(DatabaseNotConfiguredError)
    async def handle_database_not_configured(request: Request, exc: DatabaseNotConfiguredError):
        logger.error("[%s] %s", request_id_var.get(""), exc.message)
        return PlainTextResponse(exc.message, status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return PlainTextResponse("Internal server error", status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(db: Any = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        db: Database handle exposing the Firestore async API
            (collection().add / document().get/update/delete). When None,
            the lifespan creates a Firestore AsyncClient from settings.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Document CRUD Gateway",
        description="Create, read, update and delete Firestore documents over HTTP.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.db = db

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(documents.router, prefix=settings.api_prefix)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `crud_api.main:app` to be importable
app = create_app()
