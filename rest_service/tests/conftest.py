import os
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

# Must be set before config/database are imported
os.environ.setdefault("ASYNC_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON_FORMAT", "false")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

import models  # noqa: E402,F401
from checkpointer import CheckpointStore, ThreadSession  # noqa: E402
from crud import thread as thread_crud  # noqa: E402
from database import (  # noqa: E402
    create_engine_from_url,
    create_session_factory,
    get_session,
)
from dependencies import get_checkpoint_store  # noqa: E402
from main import app  # noqa: E402
from shared_models.api_schemas import ThreadCreate  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite file database per test, tables created from the models."""
    test_engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory) -> CheckpointStore:
    return CheckpointStore(session_factory)


@pytest.fixture
def thread_session(store) -> ThreadSession:
    return ThreadSession(store)


@pytest_asyncio.fixture(scope="function")
async def thread_id(session_factory) -> str:
    async with session_factory() as session:
        db_thread = await thread_crud.create_thread(
            db=session, thread_in=ThreadCreate(user_id="user-1", title="Test thread")
        )
    return db_thread.id


@pytest.fixture
def clock() -> Iterator[list[datetime]]:
    """Checkpoints get strictly increasing created_at values one second apart.

    Yields the list of timestamps handed out so far.
    """
    issued: list[datetime] = []
    start = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def tick() -> datetime:
        issued.append(start + timedelta(seconds=len(issued)))
        return issued[-1]

    with patch("checkpointer.store.get_utc_now", side_effect=tick):
        yield issued


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, store) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient bound to the app, with the test database wired in."""

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_checkpoint_store] = lambda: store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as async_client:
        yield async_client

    app.dependency_overrides.clear()
