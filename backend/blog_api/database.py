"""
Blog API Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   The engine is bound to a database URL at server start (or lazily to
       `settings.database_url` on first use). A session dependency commits
       on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system, and
       by the server module for start/stop.
When:  Engine is created once per server run; sessions are created per-request.

Binding at start time (not import time) lets the same process serve the
production database or a test database, chosen by whoever calls
`run_server(database_url)`.

Connection Pooling Strategy (server databases only):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour
    SQLite URLs use SQLAlchemy's default pool with no sizing options.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blog_api.config import settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a shared metadata
    object, which `create_tables()` uses to bootstrap the schema.
    """
    pass


# ── Engine State ──────────────────────────────────────────────────────────
# One engine per process; replaced by init_engine() and cleared by dispose_engine()
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Build create_async_engine() keyword arguments for the given URL."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    # Why: aiosqlite uses a non-queue pool that rejects pool_size/max_overflow
    if make_url(database_url).get_backend_name() == "sqlite":
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


async def init_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Bind the module engine and session factory to a database URL.

    What:  Creates a new async engine; an existing engine is disposed first.
    When:  Called by run_server() and by the test harness.

    Args:
        database_url: Async database URL; defaults to settings.database_url.

    Returns:
        The newly created engine.
    """
    global _engine, _session_factory

    url = database_url or settings.database_url
    if _engine is not None:
        await dispose_engine()

    _engine = create_async_engine(url, **_engine_options(url))
    # Why expire_on_commit=False: the store commits before the route serializes
    # the row; expired attributes would trigger a lazy load outside the session
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    logger.info("Database engine bound to %s", make_url(url).render_as_string(hide_password=True))
    return _engine


def get_engine() -> AsyncEngine:
    """Return the bound engine, binding it to settings.database_url if needed."""
    global _engine, _session_factory
    if _engine is None:
        _engine = create_async_engine(
            settings.database_url, **_engine_options(settings.database_url)
        )
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory for the bound engine."""
    get_engine()
    assert _session_factory is not None
    return _session_factory


# ── Schema Bootstrap ──────────────────────────────────────────────────────
async def create_tables() -> None:
    """
    Create any missing tables for registered models.

    Existing tables are left untouched. This is a bootstrap, not a migration
    tool: changing a column on a live database is out of scope.
    """
    # Import models so they register with Base.metadata
    from blog_api.models import post  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise  # Re-raise so the global error handler can respond
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Closes all pooled connections and forgets the engine.
    When:  Called during application shutdown and by close_server().
    """
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
