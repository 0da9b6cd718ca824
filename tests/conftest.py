"""
Spacetime API — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── db_engine / db_session_factory: in-memory SQLite store with the schema
    ├── test_client: HTTPX AsyncClient wired to the app and the SQLite store
    ├── auth_headers: bearer headers for a given subject
    └── make_memory: inserts a Memory row directly into the store
"""

import os

# Override settings BEFORE any spacetime import reads them
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-for-the-spacetime-suite-0123456789"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["CORS_ORIGINS"] = "*"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone  # noqa: E402
from typing import Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from spacetime.database import Base, get_db_session  # noqa: E402
from spacetime.models.memory import Memory  # noqa: E402
from spacetime.security import create_access_token  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = memory
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine; StaticPool keeps one connection so the data survives."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_client(db_session_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    get_db_session is overridden so requests use the in-memory store
    with the same commit/rollback behaviour as production.
    """
    from spacetime.main import create_app

    app = create_app()

    async def override_get_db_session():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """Returns a function building Authorization headers for a subject."""

    def _headers(subject: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {create_access_token(subject)}"}

    return _headers


@pytest.fixture
def make_memory(db_session_factory):
    """Inserts a memory straight into the store and returns it."""

    async def _make(
        user_id: str = "user-1",
        content: str = "A day at the beach",
        cover_url: str = "http://cdn.test/beach.png",
        is_public: bool = False,
        created_at: Optional[datetime] = None,
    ) -> Memory:
        memory = Memory(
            content=content,
            cover_url=cover_url,
            is_public=is_public,
            user_id=user_id,
            created_at=created_at or datetime.now(timezone.utc),
        )
        async with db_session_factory() as session:
            session.add(memory)
            await session.commit()
        return memory

    return _make
