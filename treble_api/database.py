"""
Treble API — Database Session Management
=========================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A Database object owns the engine and session factory. create_app()
       builds one per application and stores it on `app.state.database`;
       the get_db_session dependency pulls sessions from there.
When:  Engine is created with the app (no connection is opened until first
       use); sessions are created per-request.

Connection Pooling Strategy:
    pool_size / max_overflow come from settings for server databases.
    pool_pre_ping validates connections before use (catches stale ones).
    SQLite (used by the test suite) keeps SQLAlchemy's default pool.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from treble_api.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, the test suite's
    create_all() and Alembic's autogenerate.
    """
    pass


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Build the async engine, passing pool options only where the dialect uses them."""
    url = make_url(settings.database_url)
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


class Database:
    """
    Owns the engine and session factory for one application instance.

    expire_on_commit=False keeps ORM attributes readable after the
    per-request commit, when the response model is serialized.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(create_engine_from_settings(settings))

    async def ping(self) -> bool:
        """Run SELECT 1; False (and a warning) if the database is unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database unreachable: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's factory
        2. Yields it to the route handler
        3. On success: commits whatever is still pending
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    Teardown runs after the response has been sent, so a failure in step 3
    can no longer reach the client. Writes commit inside PatternService.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
