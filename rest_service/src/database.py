"""Database initialization and session management"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import settings


def create_engine_from_url(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite gets foreign keys switched on."""
    if url.startswith("sqlite"):
        kwargs = {}
        if ":memory:" in url:
            # One shared connection, otherwise each session sees an empty database
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(
            url, echo=echo, connect_args={"check_same_thread": False}, **kwargs
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
async_engine = create_engine_from_url(settings.ASYNC_DATABASE_URL, echo=settings.DB_ECHO)

# Create session factory
AsyncSessionLocal = create_session_factory(async_engine)


async def init_db(create_tables: bool = False) -> None:
    """Initialize database

    Args:
        create_tables: If True, creates all tables from models (migrations
            are the normal path; this is for local runs and tests)
    """
    import models  # noqa: F401  registers tables on SQLModel.metadata

    if create_tables:
        async with async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncSession:
    """Get database session"""
    session = AsyncSessionLocal()
    try:
        yield session
    finally:
        await session.close()
