"""
Blog API Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Served by uvicorn, either through blog_api.server.run_server() or
       `uvicorn blog_api.main:app`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │  Req ID  │→│  Access Log     │→│ GZip / CORS  │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────────────┐ ┌────────────────┐  │
    │  │ /posts, /posts/{id}        │ │ GET /health    │  │
    │  └────────────────────────────┘ └────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Storage→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, bind the engine if needed, create tables
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from blog_api import __version__
from blog_api.config import settings
from blog_api.database import create_tables, dispose_engine, get_engine
from blog_api.exceptions import (
    BlogAPIError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from blog_api.middleware.logging import RequestLoggingMiddleware
from blog_api.middleware.request_id import RequestIDMiddleware, request_id_var
from blog_api.routes import health, posts

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Level:  settings.log_level
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Why: these libraries log every query and request at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup sequence:
        1. Setup logging
        2. Bind the engine (already bound when started via run_server)
        3. Create missing tables

    Shutdown sequence:
        1. Dispose database engine (close all pooled connections)
    """
    setup_logging()
    logger.info("Blog API %s starting up...", __version__)

    # Why get_engine here: `python -m blog_api` never calls init_engine()
    get_engine()
    await create_tables()

    logger.info("Server ready")

    yield

    logger.info("Blog API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _validation_message(errors) -> Dict[str, Any]:
    """
    Turn FastAPI's list of body errors into a single message.

    Only the first error is reported, e.g.:
        {"loc": ("body", "title"), "type": "missing"}
        → "Missing `title` in request body"
    """
    if not errors:
        return {"message": "Invalid request body", "field": None}

    error = errors[0]
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = loc[0] if loc else None

    if error.get("type") == "missing":
        if field is None:
            return {"message": "Missing request body", "field": None}
        return {"message": f"Missing `{field}` in request body", "field": field}

    ctx_error = (error.get("ctx") or {}).get("error")
    detail = str(ctx_error) if ctx_error else error.get("msg", "invalid value")
    if field is None:
        return {"message": f"Invalid request body: {detail}", "field": None}
    return {"message": f"Invalid `{field}`: {detail}", "field": field}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RequestValidationError  → 400 Bad Request (schema check failed)
        ValidationError         → 400 Bad Request (business rule failed)
        NotFoundError           → 404 Not Found
        StorageError            → 500 Internal Server Error (generic message)
        BlogAPIError (base)     → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    5xx responses never carry internal details; those are logged server-side.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        summary = _validation_message(exc.errors())
        logger.warning("[%s] Request validation error: %s", rid, summary["message"])
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": summary["message"],
                "details": {"field": summary["field"]} if summary["field"] else {},
                "request_id": rid,
            },
        )

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

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        """Generic message to the client; context logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(BlogAPIError)
    async def handle_app_error(request: Request, exc: BlogAPIError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
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
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Blog API",
        description="Create, read, update and delete blog posts.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    # Why minimum_size=500: a single post compresses to little or nothing
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(posts.router)
    app.include_router(health.router)

    return app


# uvicorn expects `blog_api.main:app` to be importable
app = create_app()
