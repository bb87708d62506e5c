"""Staging area for per-channel values produced mid-step by a running agent."""

from typing import Any, Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from crud import checkpoint as checkpoint_crud
from metrics import pending_writes_staged_total, track_operation
from models.base import get_utc_now
from shared_models import LogEventType, get_logger

from .errors import InvalidArgument, MissingThread, StoreUnavailable
from .records import PendingWrite
from .serializer import CheckpointSerializer

logger = get_logger(__name__)


class WriteBuffer:
    """Upserts pending writes keyed by (thread, namespace, checkpoint, task, channel).

    Writes from different tasks never collide; a repeated write from the same
    task and channel replaces the earlier value.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        serializer: CheckpointSerializer | None = None,
    ):
        self._session_factory = session_factory
        self.serializer = serializer or CheckpointSerializer()

    def _build_rows(
        self,
        thread_id: str,
        checkpoint_id: str,
        task_id: str,
        writes: Iterable[tuple[str, Any]],
        checkpoint_ns: str,
    ) -> list[dict[str, Any]]:
        staged: dict[str, Any] = {}
        for channel, value in writes:
            if not channel:
                raise InvalidArgument("channel is required for every write")
            # Absent values are stored as an empty structure, never null
            staged[channel] = {} if value is None else value

        now = get_utc_now()
        rows = []
        for channel, value in staged.items():
            encoded = self.serializer.encode(value)
            rows.append(
                {
                    "thread_id": thread_id,
                    "checkpoint_ns": checkpoint_ns,
                    "checkpoint_id": checkpoint_id,
                    "task_id": task_id,
                    "channel": channel,
                    "value_type": encoded.type,
                    "value": encoded.data,
                    "created_at": now,
                    "updated_at": now,
                }
            )
        return rows

    async def stage(
        self,
        thread_id: str,
        checkpoint_id: str,
        task_id: str,
        writes: Iterable[tuple[str, Any]],
        session: AsyncSession | None = None,
        *,
        checkpoint_ns: str = "",
    ) -> None:
        """Stage ``(channel, value)`` pairs against a checkpoint.

        With ``session`` the rows join the caller's transaction and nothing is
        committed here.
        """
        if not thread_id:
            raise MissingThread("thread_id is required")
        if not checkpoint_id:
            raise InvalidArgument("checkpoint_id is required")
        if not task_id:
            raise InvalidArgument("task_id is required")

        rows = self._build_rows(thread_id, checkpoint_id, task_id, writes, checkpoint_ns)
        if not rows:
            return

        with track_operation("stage"):
            try:
                if session is not None:
                    await checkpoint_crud.upsert_writes(session, rows)
                else:
                    async with self._session_factory() as own_session:
                        await checkpoint_crud.upsert_writes(own_session, rows)
                        await own_session.commit()
            except IntegrityError as e:
                raise MissingThread(f"Thread {thread_id} does not exist") from e
            except SQLAlchemyError as e:
                logger.error(
                    "Error staging writes",
                    event_type=LogEventType.ERROR,
                    thread_id=thread_id,
                    checkpoint_ns=checkpoint_ns,
                    checkpoint_id=checkpoint_id,
                    task_id=task_id,
                    error=str(e),
                )
                raise StoreUnavailable(f"Failed to stage writes: {e}") from e

        pending_writes_staged_total.inc(len(rows))
        logger.debug(
            "Writes staged",
            event_type=LogEventType.WRITES_STAGED,
            thread_id=thread_id,
            checkpoint_ns=checkpoint_ns,
            checkpoint_id=checkpoint_id,
            task_id=task_id,
            channels=[row["channel"] for row in rows],
        )

    async def drain(
        self,
        thread_id: str,
        checkpoint_id: str,
        session: AsyncSession | None = None,
        *,
        checkpoint_ns: str = "",
    ) -> list[PendingWrite]:
        """All writes currently staged for a checkpoint, ordered by task and channel."""
        if not thread_id:
            raise MissingThread("thread_id is required")
        if not checkpoint_id:
            raise InvalidArgument("checkpoint_id is required")

        try:
            if session is not None:
                rows = await checkpoint_crud.get_writes(
                    session, thread_id, checkpoint_id, checkpoint_ns
                )
            else:
                async with self._session_factory() as own_session:
                    rows = await checkpoint_crud.get_writes(
                        own_session, thread_id, checkpoint_id, checkpoint_ns
                    )
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to read pending writes: {e}") from e

        return [
            PendingWrite(
                task_id=row.task_id,
                channel=row.channel,
                value=self.serializer.decode((row.value_type, row.value)),
            )
            for row in rows
        ]
