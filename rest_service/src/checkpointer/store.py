"""Durable, versioned log of agent execution checkpoints keyed by thread."""

from datetime import datetime
from typing import Any, AsyncIterator, List, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from crud import checkpoint as checkpoint_crud
from metrics import track_operation
from models.base import get_utc_now
from models.checkpoint import Checkpoint
from shared_models import LogEventType, get_logger
from shared_models.api_schemas.base import ensure_utc

from .errors import CheckpointError, MissingThread, StoreUnavailable
from .ids import generate_checkpoint_id, generate_task_id
from .records import CheckpointAddress, CheckpointTuple, PendingWrite
from .serializer import CheckpointSerializer
from .write_buffer import WriteBuffer

logger = get_logger(__name__)


class CheckpointStore:
    """Upsert, point lookup and newest-first listing of checkpoints per thread.

    The store keeps no state between calls: every operation opens its own
    session from ``session_factory`` and concurrency control is left to the
    database's upsert on ``(thread_id, checkpoint_id)``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        serializer: CheckpointSerializer | None = None,
        write_buffer: WriteBuffer | None = None,
        *,
        default_list_limit: int = 10,
        raise_on_list_error: bool = True,
    ):
        self._session_factory = session_factory
        self.serializer = serializer or CheckpointSerializer()
        self.write_buffer = write_buffer or WriteBuffer(
            session_factory, self.serializer
        )
        self.default_list_limit = default_list_limit
        self.raise_on_list_error = raise_on_list_error

    @classmethod
    def from_settings(
        cls, session_factory: async_sessionmaker[AsyncSession], settings: Any
    ) -> "CheckpointStore":
        return cls(
            session_factory,
            default_list_limit=settings.CHECKPOINT_LIST_LIMIT,
            raise_on_list_error=settings.CHECKPOINT_LIST_RAISE_ON_ERROR,
        )

    async def put(
        self,
        thread_id: str,
        checkpoint_data: Any,
        metadata: Any = None,
        *,
        checkpoint_id: str | None = None,
        parent_checkpoint_id: str | None = None,
        new_channel_values: Mapping[str, Any] | None = None,
        checkpoint_ns: str = "",
    ) -> str:
        """Save a checkpoint and return its id.

        ``new_channel_values`` are staged under a fresh synthetic task id in
        the same transaction, so a failed put leaves nothing behind.
        ``checkpoint_ns`` keeps a subgraph's history apart from the root
        graph's; the default ``""`` is the root namespace.
        """
        if not thread_id:
            raise MissingThread("thread_id is required")

        resolved_id = checkpoint_id or generate_checkpoint_id()
        data = self.serializer.encode(checkpoint_data)
        meta = self.serializer.encode({} if metadata is None else metadata)

        with track_operation("put"):
            try:
                async with self._session_factory() as session:
                    await checkpoint_crud.upsert_checkpoint(
                        session,
                        thread_id=thread_id,
                        checkpoint_ns=checkpoint_ns,
                        checkpoint_id=resolved_id,
                        parent_checkpoint_id=parent_checkpoint_id,
                        checkpoint_type=data.type,
                        checkpoint_data=data.data,
                        metadata_type=meta.type,
                        checkpoint_metadata=meta.data,
                        now=get_utc_now(),
                    )
                    if new_channel_values:
                        await self.write_buffer.stage(
                            thread_id,
                            resolved_id,
                            generate_task_id(),
                            list(new_channel_values.items()),
                            session=session,
                            checkpoint_ns=checkpoint_ns,
                        )
                    await session.commit()
            except IntegrityError as e:
                logger.warning(
                    "Checkpoint references unknown thread",
                    event_type=LogEventType.WARNING,
                    thread_id=thread_id,
                    checkpoint_id=resolved_id,
                )
                raise MissingThread(f"Thread {thread_id} does not exist") from e
            except SQLAlchemyError as e:
                logger.error(
                    "Error saving checkpoint",
                    event_type=LogEventType.ERROR,
                    thread_id=thread_id,
                    checkpoint_id=resolved_id,
                    error=str(e),
                )
                raise StoreUnavailable(f"Failed to save checkpoint: {e}") from e

        logger.info(
            "Checkpoint saved",
            event_type=LogEventType.CHECKPOINT_SAVE,
            thread_id=thread_id,
            checkpoint_ns=checkpoint_ns,
            checkpoint_id=resolved_id,
            parent_checkpoint_id=parent_checkpoint_id,
            channel_values=len(new_channel_values or {}),
        )
        return resolved_id

    async def get(
        self,
        thread_id: str,
        checkpoint_id: str | None = None,
        *,
        checkpoint_ns: str = "",
    ) -> CheckpointTuple | None:
        """Return one checkpoint, or the latest one when no id is given.

        ``None`` means the thread (or that id) has no checkpoint in
        ``checkpoint_ns``.
        """
        if not thread_id:
            raise MissingThread("thread_id is required")

        with track_operation("get"):
            try:
                async with self._session_factory() as session:
                    if checkpoint_id:
                        row = await checkpoint_crud.get_checkpoint(
                            session, thread_id, checkpoint_id, checkpoint_ns
                        )
                    else:
                        row = await checkpoint_crud.get_latest_checkpoint(
                            session, thread_id, checkpoint_ns
                        )
                    if row is None:
                        return None
                    writes = await self.write_buffer.drain(
                        thread_id,
                        row.checkpoint_id,
                        session=session,
                        checkpoint_ns=checkpoint_ns,
                    )
            except SQLAlchemyError as e:
                logger.error(
                    "Error getting checkpoint",
                    event_type=LogEventType.ERROR,
                    thread_id=thread_id,
                    checkpoint_id=checkpoint_id,
                    error=str(e),
                )
                raise StoreUnavailable(f"Failed to load checkpoint: {e}") from e

            result = self._to_tuple(row, writes)

        logger.debug(
            "Checkpoint loaded",
            event_type=LogEventType.CHECKPOINT_LOAD,
            thread_id=thread_id,
            checkpoint_id=row.checkpoint_id,
            pending_writes=len(writes),
        )
        return result

    def _to_tuple(self, row: Checkpoint, writes: List[PendingWrite]) -> CheckpointTuple:
        parent = None
        if row.parent_checkpoint_id:
            parent = CheckpointAddress(
                thread_id=row.thread_id,
                checkpoint_ns=row.checkpoint_ns,
                checkpoint_id=row.parent_checkpoint_id,
            )
        return CheckpointTuple(
            config=CheckpointAddress(
                thread_id=row.thread_id,
                checkpoint_ns=row.checkpoint_ns,
                checkpoint_id=row.checkpoint_id,
            ),
            checkpoint=self.serializer.decode((row.checkpoint_type, row.checkpoint_data)),
            metadata=self.serializer.decode((row.metadata_type, row.checkpoint_metadata)),
            parent_config=parent,
            pending_writes=writes,
            created_at=ensure_utc(row.created_at),
        )

    async def list(
        self,
        thread_id: str,
        limit: int | None = None,
        before: datetime | None = None,
        *,
        checkpoint_ns: str = "",
    ) -> AsyncIterator[CheckpointTuple]:
        """Yield up to ``limit`` checkpoints newest first.

        ``before`` keeps only checkpoints strictly older than it; pass the
        oldest ``created_at`` seen so far to fetch the next page. Pending
        writes are fetched per element. A failure is logged and, unless
        ``raise_on_list_error`` is off, raised after the elements already
        yielded.
        """
        if not thread_id:
            raise MissingThread("thread_id is required")

        if limit is None:
            limit = self.default_list_limit
        if limit <= 0:
            return
        if before is not None:
            before = ensure_utc(before)

        try:
            with track_operation("list"):
                async with self._session_factory() as session:
                    rows = await checkpoint_crud.list_checkpoints(
                        session,
                        thread_id,
                        limit=limit,
                        before=before,
                        checkpoint_ns=checkpoint_ns,
                    )
            logger.debug(
                "Listing checkpoints",
                event_type=LogEventType.CHECKPOINT_LIST,
                thread_id=thread_id,
                limit=limit,
                before=before.isoformat() if before else None,
                found=len(rows),
            )
            for row in rows:
                writes = await self.write_buffer.drain(
                    thread_id, row.checkpoint_id, checkpoint_ns=checkpoint_ns
                )
                yield self._to_tuple(row, writes)
        except (SQLAlchemyError, CheckpointError) as e:
            logger.error(
                "Error listing checkpoints",
                event_type=LogEventType.ERROR,
                thread_id=thread_id,
                error=str(e),
            )
            if not self.raise_on_list_error:
                return
            if isinstance(e, SQLAlchemyError):
                raise StoreUnavailable(f"Failed to list checkpoints: {e}") from e
            raise
