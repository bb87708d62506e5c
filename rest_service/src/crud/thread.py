import logging

from sqlalchemy import delete, desc, select
from sqlmodel.ext.asyncio.session import AsyncSession

from models.base import get_utc_now
from models.thread import Thread
from shared_models.api_schemas import ThreadCreate, ThreadUpdate

logger = logging.getLogger(__name__)


async def create_thread(db: AsyncSession, thread_in: ThreadCreate) -> Thread:
    """Create a new thread for a user."""
    db_thread = Thread.model_validate(thread_in)
    db.add(db_thread)
    await db.commit()
    await db.refresh(db_thread)
    logger.info(f"Thread created with ID: {db_thread.id}, user: {db_thread.user_id}")
    return db_thread


async def get_thread(
    db: AsyncSession, thread_id: str, include_deleted: bool = False
) -> Thread | None:
    """Get a thread by ID; soft-deleted threads are hidden by default."""
    query = select(Thread).where(Thread.id == thread_id)
    if not include_deleted:
        query = query.where(Thread.is_deleted.is_(False))
    result = await db.execute(query)
    return result.scalars().first()


async def get_user_threads(
    db: AsyncSession, user_id: str, skip: int = 0, limit: int = 20
) -> list[Thread]:
    """Get a user's threads, most recently active first."""
    query = (
        select(Thread)
        .where(Thread.user_id == user_id, Thread.is_deleted.is_(False))
        .order_by(desc(Thread.updated_at))
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_thread(
    db: AsyncSession, db_thread: Thread, thread_in: ThreadUpdate
) -> Thread:
    update_data = thread_in.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_thread, key, value)

    db.add(db_thread)
    await db.commit()
    await db.refresh(db_thread)
    logger.info(f"Thread updated with ID: {db_thread.id}")
    return db_thread


async def touch_thread(db: AsyncSession, db_thread: Thread) -> Thread:
    """Bump updated_at, e.g. after a new turn was processed."""
    db_thread.updated_at = get_utc_now()
    db.add(db_thread)
    await db.commit()
    await db.refresh(db_thread)
    return db_thread


async def soft_delete_thread(db: AsyncSession, db_thread: Thread) -> Thread:
    """Hide a thread; its checkpoints stay until permanent deletion."""
    db_thread.is_deleted = True
    db.add(db_thread)
    await db.commit()
    await db.refresh(db_thread)
    logger.info(f"Thread soft-deleted with ID: {db_thread.id}")
    return db_thread


async def delete_thread(db: AsyncSession, thread_id: str) -> bool:
    """Permanently delete a thread; checkpoints and writes cascade."""
    result = await db.execute(delete(Thread).where(Thread.id == thread_id))
    await db.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Thread permanently deleted with ID: {thread_id}")
    return deleted
