"""Statements behind the checkpoint store.

Nothing here commits: the caller owns the transaction so a checkpoint and the
writes staged with it land together.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Table, desc, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel.ext.asyncio.session import AsyncSession

from models.checkpoint import Checkpoint, CheckpointWrite

_CHECKPOINT_PAYLOAD = (
    "parent_checkpoint_id",
    "checkpoint_type",
    "checkpoint_data",
    "metadata_type",
    "checkpoint_metadata",
    "updated_at",
)
_WRITE_PAYLOAD = ("value_type", "value", "updated_at")


def _insert(db: AsyncSession, table: Table):
    """Dialect-specific INSERT that supports ON CONFLICT DO UPDATE."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert is not supported for dialect {dialect!r}")


async def upsert_checkpoint(
    db: AsyncSession,
    *,
    thread_id: str,
    checkpoint_id: str,
    parent_checkpoint_id: str | None,
    checkpoint_type: str,
    checkpoint_data: bytes,
    metadata_type: str,
    checkpoint_metadata: bytes,
    now: datetime,
    checkpoint_ns: str = "",
) -> None:
    stmt = _insert(db, Checkpoint.__table__).values(
        thread_id=thread_id,
        checkpoint_ns=checkpoint_ns,
        checkpoint_id=checkpoint_id,
        parent_checkpoint_id=parent_checkpoint_id,
        checkpoint_type=checkpoint_type,
        checkpoint_data=checkpoint_data,
        metadata_type=metadata_type,
        checkpoint_metadata=checkpoint_metadata,
        created_at=now,
        updated_at=now,
    )
    # created_at is left alone so a rewrite does not reorder history
    stmt = stmt.on_conflict_do_update(
        index_elements=["thread_id", "checkpoint_ns", "checkpoint_id"],
        set_={name: stmt.excluded[name] for name in _CHECKPOINT_PAYLOAD},
    )
    await db.execute(stmt)


async def upsert_writes(db: AsyncSession, rows: list[dict[str, Any]]) -> None:
    """Upsert pending writes keyed by (thread, namespace, checkpoint, task, channel).

    Rows must not repeat a key: a multi-row upsert may touch each row once.
    """
    if not rows:
        return
    stmt = _insert(db, CheckpointWrite.__table__).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=[
            "thread_id",
            "checkpoint_ns",
            "checkpoint_id",
            "task_id",
            "channel",
        ],
        set_={name: stmt.excluded[name] for name in _WRITE_PAYLOAD},
    )
    await db.execute(stmt)


async def get_checkpoint(
    db: AsyncSession, thread_id: str, checkpoint_id: str, checkpoint_ns: str = ""
) -> Checkpoint | None:
    stmt = select(Checkpoint).where(
        Checkpoint.thread_id == thread_id,
        Checkpoint.checkpoint_ns == checkpoint_ns,
        Checkpoint.checkpoint_id == checkpoint_id,
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_latest_checkpoint(
    db: AsyncSession, thread_id: str, checkpoint_ns: str = ""
) -> Checkpoint | None:
    stmt = (
        select(Checkpoint)
        .where(
            Checkpoint.thread_id == thread_id,
            Checkpoint.checkpoint_ns == checkpoint_ns,
        )
        .order_by(desc(Checkpoint.created_at), desc(Checkpoint.checkpoint_id))
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def list_checkpoints(
    db: AsyncSession,
    thread_id: str,
    *,
    limit: int,
    before: datetime | None = None,
    checkpoint_ns: str = "",
) -> list[Checkpoint]:
    """Newest first within one namespace; ``before`` keeps only checkpoints strictly older."""
    stmt = select(Checkpoint).where(
        Checkpoint.thread_id == thread_id,
        Checkpoint.checkpoint_ns == checkpoint_ns,
    )
    if before is not None:
        stmt = stmt.where(Checkpoint.created_at < before)
    stmt = stmt.order_by(
        desc(Checkpoint.created_at), desc(Checkpoint.checkpoint_id)
    ).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_writes(
    db: AsyncSession, thread_id: str, checkpoint_id: str, checkpoint_ns: str = ""
) -> list[CheckpointWrite]:
    stmt = (
        select(CheckpointWrite)
        .where(
            CheckpointWrite.thread_id == thread_id,
            CheckpointWrite.checkpoint_ns == checkpoint_ns,
            CheckpointWrite.checkpoint_id == checkpoint_id,
        )
        .order_by(CheckpointWrite.task_id, CheckpointWrite.channel)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
