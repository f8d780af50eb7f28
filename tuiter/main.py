"""
Tuiter Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers, routers and the
       process-wide store bundle; the module-level ``app`` is what uvicorn
       serves (uvicorn tuiter.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────┐ ┌─────────┐  │
    │  │ Session  │→│  Req ID  │→│ Logging │→│GZip/CORS│  │
    │  └──────────┘ └──────────┘ └─────────┘ └─────────┘  │
    │                                                     │
    │  Routes: users · auth · tuits · likes · dislikes ·  │
    │          bookmarks · health                         │
    │                                                     │
    │  app.state: engine, session_factory, stores,        │
    │             annotator                               │
    │                                                     │
    │  Exception Handlers:                                │
    │  NotFound→404 │ Conflict/Unauth/Credentials→403 │   │
    │  StoreError→500 │ Exception→500                     │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config validation → create missing tables
    Shutdown: dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.middleware.sessions import SessionMiddleware

from tuiter import __version__
from tuiter.config import settings
from tuiter.database import build_session_factory, engine as default_engine, init_models
from tuiter.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    StoreError,
    UnauthenticatedError,
)
from tuiter.middleware.logging import RequestLoggingMiddleware
from tuiter.middleware.request_id import RequestIDMiddleware, request_id_var
from tuiter.routes import auth, health, tuits, users
from tuiter.routes._responses import error_response
from tuiter.routes.relations import RELATIONS, build_relation_router
from tuiter.services.annotation import TuitAnnotator
from tuiter.stores import build_stores

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Tuiter Backend %s starting up...", __version__)

    # Keep serving on misconfiguration so health checks still answer
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    if settings.db_create_tables:
        await init_models(app.state.engine)
        logger.info("Database tables verified")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Tuiter Backend shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        NotFoundError            → 404 Not Found
        ConflictError            → 403 Forbidden
        UnauthenticatedError     → 403 Forbidden
        InvalidCredentialsError  → 403 Forbidden
        StoreError               → 500 Internal Server Error (generic message)
        Exception (fallback)     → 500 Internal Server Error

    Internal details (SQL, stack traces) are logged, never returned.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("[%s] Conflict: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(403, "conflict", exc.message)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return error_response(403, "unauthenticated", exc.message)

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return error_response(403, "invalid_credentials", exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        rid = request_id_var.get("")
        logger.error("[%s] Store error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(bind: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        bind: Engine the stores run against. Defaults to the process-wide
              engine from tuiter.database; tests pass a temporary one.

    Returns:
        Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Tuiter API",
        description="Users, tuits, likes, dislikes, bookmarks and session authentication.",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Shared state ──────────────────────────────────────────────────────
    app.state.engine = bind if bind is not None else default_engine
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.stores = build_stores(app.state.session_factory)
    app.state.annotator = TuitAnnotator(
        likes=app.state.stores.likes,
        dislikes=app.state.stores.dislikes,
        bookmarks=app.state.stores.bookmarks,
    )

    # ── Register Middleware (last added runs first) ───────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # session cookie
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.session_https_only,
    )

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(tuits.router)
    for relation in RELATIONS:
        app.include_router(build_relation_router(relation))
    app.include_router(health.router)

    return app


app = create_app()
