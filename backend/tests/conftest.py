"""
Blog API Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── database:        Engine bound to TEST_DATABASE_URL, emptied on teardown
    ├── store:           Runs one PostStore call in its own committed session
    ├── seed_posts:      10 Faker-generated posts inserted via insert_many
    ├── test_client:     HTTPX AsyncClient wired to the FastAPI app
    ├── mock_db_session: AsyncMock session for failure-path unit tests
    ├── new_post_data:   A valid POST /posts body
    └── fake:            Faker instance

Store calls in tests use short sessions that commit and close before the
next HTTP request, so a test never holds a SQLite lock across a write.
"""

import os
import shutil
import tempfile

# Override settings BEFORE any blog_api import reads them
# Why both URLs: fixtures bind TEST_DATABASE_URL; anything that binds lazily
# (health checks, teardown after close_server) falls back to DATABASE_URL
_TEST_DB_DIR = tempfile.mkdtemp(prefix="blog-api-tests-")
_TEST_DB_URL = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test-blog.db')}"
os.environ["TEST_DATABASE_URL"] = _TEST_DB_URL
os.environ["DATABASE_URL"] = _TEST_DB_URL
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Callable, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from faker import Faker  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from blog_api.config import settings  # noqa: E402
from blog_api.database import (  # noqa: E402
    create_tables,
    dispose_engine,
    get_session_factory,
    init_engine,
)
from blog_api.services.post_store import post_store  # noqa: E402


def generate_post_data(fake: Faker) -> Dict[str, Any]:
    """A POST /posts body with a structured author."""
    return {
        "author": {
            "firstName": fake.first_name(),
            "lastName": fake.last_name(),
        },
        "title": fake.sentence(),
        "content": fake.paragraph(),
    }


@pytest.fixture
def fake() -> Faker:
    return Faker()


@pytest.fixture
def new_post_data(fake) -> Dict[str, Any]:
    return generate_post_data(fake)


@pytest.fixture(scope="session", autouse=True)
def _test_database_dir():
    """Removes the test database directory after the run."""
    yield
    shutil.rmtree(_TEST_DB_DIR, ignore_errors=True)


@pytest_asyncio.fixture
async def database():
    """
    Binds the engine to settings.test_database_url with the schema created.

    Teardown deletes every post through PostStore.delete_all and disposes
    the engine, so each test starts from an empty collection.
    """
    url = settings.test_database_url
    await init_engine(url)
    await create_tables()
    yield url
    # Why lazy rebind is safe: close_server() may have disposed the engine,
    # and DATABASE_URL points at the same test database
    async with get_session_factory()() as session:
        await post_store.delete_all(session)
    await dispose_engine()


@pytest.fixture
def store(database) -> Callable:
    """
    Run a PostStore method in a short-lived session.

    Usage:
        count = await store("count")
        post = await store("find_by_id", post_id)
    """

    async def call(method: str, *args: Any) -> Any:
        async with get_session_factory()() as session:
            result = await getattr(post_store, method)(session, *args)
            await session.commit()
            return result

    return call


@pytest_asyncio.fixture
async def seed_posts(store, fake):
    """Inserts 10 posts with Faker authors, titles and bodies."""
    records = [
        {
            "author": {"firstName": fake.first_name(), "lastName": fake.last_name()},
            "title": fake.sentence(),
            "content": fake.text(),
        }
        for _ in range(10)
    ]
    return await store("insert_many", records)


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed straight into the FastAPI app (no socket).

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/posts")
            assert response.status_code == 200
    """
    from blog_api.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    Mock async database session for failure-path tests.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
        with pytest.raises(StorageError):
            await post_store.list_all(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session
