"""
Blog API Backend — HTTP Server Lifecycle
==========================================

What:  Start and stop a uvicorn server for the application in-process.
How:   run_server() binds the database engine, creates missing tables,
       starts uvicorn.Server.serve() as a background task and waits until
       it is listening. close_server() signals the server to exit, awaits
       the task and disposes the engine.
Who:   The test harness, and anything embedding the API in an event loop.
       `python -m blog_api` runs the same app in the foreground instead.

State:
    At most one server per process. Starting a second one raises
    ServerStateError. Closing when nothing runs is a no-op.
"""

import asyncio
import logging
from typing import Optional

import uvicorn

from blog_api.config import settings
from blog_api.database import create_tables, dispose_engine, init_engine
from blog_api.exceptions import ServerStateError

logger = logging.getLogger(__name__)

_server: Optional[uvicorn.Server] = None
_serve_task: Optional["asyncio.Task[None]"] = None

STARTUP_POLL_INTERVAL = 0.05


async def run_server(
    database_url: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> str:
    """
    Start serving the API and return its base URL once it is listening.

    Args:
        database_url: Async database URL; defaults to settings.database_url
        host: Bind address; defaults to settings.backend_host
        port: Bind port; defaults to settings.backend_port (0 picks a free port)

    Returns:
        Base URL such as "http://127.0.0.1:8080".

    Raises:
        ServerStateError: A server is already running, or uvicorn exited
            before it started listening.
        StorageError / SQLAlchemy errors: the database could not be reached.
    """
    global _server, _serve_task

    if _server is not None:
        raise ServerStateError(context={"running": True})

    bind_host = host or settings.backend_host
    bind_port = settings.backend_port if port is None else port

    await init_engine(database_url)
    try:
        await create_tables()
    except Exception:
        await dispose_engine()
        raise

    # Why an import string: the same `app` object the tests import, with
    # lifespan on so startup and shutdown run exactly as under the CLI
    config = uvicorn.Config(
        "blog_api.main:app",
        host=bind_host,
        port=bind_port,
        lifespan="on",
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve())
    _server, _serve_task = server, task

    while not server.started:
        if task.done():
            _server, _serve_task = None, None
            await dispose_engine()
            # Surface the serve() exception, if any
            task.result()
            raise ServerStateError(message="Server exited before it started listening")
        await asyncio.sleep(STARTUP_POLL_INTERVAL)

    sockname = server.servers[0].sockets[0].getsockname()
    url = f"http://{sockname[0]}:{sockname[1]}"
    logger.info("Server listening on %s", url)
    return url


async def close_server() -> None:
    """
    Stop the running server and release the database engine.

    Safe to call when no server is running.
    """
    global _server, _serve_task

    if _server is None:
        logger.debug("close_server called with no running server")
        return

    server, task = _server, _serve_task
    _server, _serve_task = None, None

    server.should_exit = True
    try:
        if task is not None:
            await task
    finally:
        await dispose_engine()
    logger.info("Server closed")


def is_running() -> bool:
    return _server is not None
