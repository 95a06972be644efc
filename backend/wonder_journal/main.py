"""
Wonder Journal Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn wonder_journal.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌────────┐ ┌──────────────┐ ┌─────────┐ │
    │  │ Rate Limit │→│ Req ID │→│ JWT (state)  │→│ Logging │ │
    │  └────────────┘ └────────┘ └──────────────┘ └─────────┘ │
    │                                                          │
    │  Routes:                                                 │
    │  /auth  /users  /moments  /tags  /health                 │
    │                                                          │
    │  Exception Handlers:                                     │
    │  JournalError→exc.status │ validation→400 │ other→500    │
    └──────────────────────────────────────────────────────────┘

Every error response has the same body:
    {"error": {"message": "...", "status": 404}, "request_id": "a1b2c3d4"}

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (warn on the development secret key)
    3. Log startup complete

    Shutdown:
    1. Dispose database engine (close all connections)
    2. Log shutdown complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wonder_journal import __version__
from wonder_journal.config import settings
from wonder_journal.database import dispose_engine
from wonder_journal.exceptions import DatabaseError, JournalError, Message
from wonder_journal.middleware.auth import AuthenticateJWTMiddleware
from wonder_journal.middleware.logging import RequestLoggingMiddleware
from wonder_journal.middleware.rate_limit import RateLimitMiddleware
from wonder_journal.middleware.request_id import RequestIDMiddleware, current_request_id
from wonder_journal.routes import auth, health, moments, tags, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup, before anything else logs.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: code before yield runs on startup, code
    after yield on shutdown.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Wonder Journal Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Development runs are allowed to continue with the default secret
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Wonder Journal Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(message: Message, status: int, headers=None) -> JSONResponse:
    """Render the error envelope shared by every failing endpoint."""
    return JSONResponse(
        status_code=status,
        content={
            "error": {"message": message, "status": status},
            "request_id": current_request_id(),
        },
        headers=headers,
    )


def validation_messages(exc: RequestValidationError) -> List[str]:
    """
    One message per failing field, e.g. "firstName: Field required".

    The leading "body" / "query" / "path" location is dropped.
    """
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        field = ".".join(loc)
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RequestValidationError  → 400, list of messages
        JournalError (and subclasses) → exc.status
        DatabaseError           → 500, generic message, details logged
        HTTPException           → its status (unknown routes, bad methods)
        Exception (fallback)    → 500

    Handlers never expose internal details (stack traces, SQL) in the
    response. Details are logged server-side.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        messages = validation_messages(exc)
        logger.warning("[%s] Validation error: %s", current_request_id(), "; ".join(messages))
        return error_response(messages, 400)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = current_request_id()
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(exc.message, exc.status)

    @app.exception_handler(JournalError)
    async def handle_journal_error(request: Request, exc: JournalError):
        rid = current_request_id()
        if exc.status >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc)
        headers = None
        retry_after = getattr(exc, "retry_after", None)
        if retry_after:
            headers = {"Retry-After": str(retry_after)}
        return error_response(exc.message, exc.status, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(str(exc.detail), exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, full stack trace logged server-side only."""
        logger.error(
            "[%s] Unexpected error: %s",
            current_request_id(),
            str(exc),
            exc_info=True,
        )
        return error_response("An unexpected error occurred. Please try again later.", 500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Wonder Journal API",
        description=(
            "Journaling backend: users record moments (diary entries) with "
            "media attachments and tags."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → JWT → Logging → GZip → CORS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)

    # Inside the JWT middleware so the access log can name the user
    app.add_middleware(RequestLoggingMiddleware)

    # Stores the verified token payload on request.state.user
    app.add_middleware(AuthenticateJWTMiddleware)

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(moments.router)
    app.include_router(tags.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `wonder_journal.main:app` to be importable
app = create_app()
