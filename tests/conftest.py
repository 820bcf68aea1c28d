"""
Treble API — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── blocked_terms_file: Temporary word list
    ├── moderation: ModerationFilter built from that list
    ├── mock_db_session: Mock AsyncSession (service unit tests)
    ├── test_settings: Settings pointing at a temp SQLite database
    ├── test_app: create_app() with tables created
    └── test_client: HTTPX AsyncClient wired to test_app
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="treble_test_"), "import.db"
)
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from treble_api.config import Settings  # noqa: E402
from treble_api.database import Base  # noqa: E402
from treble_api.services.moderation import ModerationFilter  # noqa: E402

TEST_BLOCKED_TERMS = ["darn", "heck", "rubbish", "dang it"]


@pytest.fixture
def blocked_terms_file(tmp_path):
    """Word list with a blank and a whitespace-only line mixed in."""
    path = tmp_path / "blocked_terms.txt"
    path.write_text("darn\n\nheck\n   \nRubbish\ndang it\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def moderation():
    return ModerationFilter(TEST_BLOCKED_TERMS)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = pattern
        result = await service.get_by_slug(mock_db_session, "s1")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_upload():
    """A valid POST /upload body in wire (camelCase) format."""
    return {
        "patternUrl": "https://files.example.com/highland-reel.pdf",
        "patternName": "Highland Reel",
        "authorName": "A",
        "description": "trad tune",
        "slug": "s1",
    }


@pytest.fixture
def test_settings(tmp_path, blocked_terms_file):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        blocked_terms_path=blocked_terms_file,
        api_prefix="/api",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def test_app(test_settings):
    """Application on a fresh SQLite file with the schema created."""
    from treble_api.main import create_app

    app = create_app(test_settings)
    async with app.state.database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield app
    await app.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/api/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
