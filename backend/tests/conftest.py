from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from time_ledger.db import get_session
from time_ledger.main import app
from time_ledger.models import SQLModel
from time_ledger.services.assignment import InMemoryAssignmentDirectory, set_assignment_directory
from time_ledger.services.worker import InMemoryWorkerDirectory, set_worker_directory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A fresh in-memory SQLite database per test with every table created."""
    _engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a session on the per-test database.

    Services commit and roll back on their own, so isolation comes from the
    throwaway database rather than an outer transaction.
    """
    async with AsyncSession(bind=engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def worker_directory() -> Iterator[InMemoryWorkerDirectory]:
    """Install an empty worker directory for the test."""
    directory = InMemoryWorkerDirectory()
    set_worker_directory(directory)
    yield directory
    set_worker_directory(InMemoryWorkerDirectory())


@pytest.fixture
def assignment_directory() -> Iterator[InMemoryAssignmentDirectory]:
    """Install an empty assignment directory for the test."""
    directory = InMemoryAssignmentDirectory()
    set_assignment_directory(directory)
    yield directory
    set_assignment_directory(InMemoryAssignmentDirectory())
