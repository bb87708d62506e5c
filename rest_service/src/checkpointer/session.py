from typing import Any, Iterable, Mapping

from .records import ResumableState
from .store import CheckpointStore


class ThreadSession:
    """What the agent loop calls around a turn: resume, then commit."""

    def __init__(self, store: CheckpointStore):
        self.store = store

    async def resume(self, thread_id: str) -> ResumableState:
        """Latest state of a thread, or an empty state for a new one."""
        latest = await self.store.get(thread_id)
        if latest is None:
            return ResumableState(thread_id=thread_id)
        return ResumableState(
            thread_id=thread_id,
            checkpoint_id=latest.config.checkpoint_id,
            state=latest.checkpoint,
            metadata=latest.metadata,
            pending_writes=latest.pending_writes,
        )

    async def commit(
        self,
        thread_id: str,
        state: Any,
        *,
        parent: str | None = None,
        metadata: Any = None,
        partial_writes: Mapping[str, Any] | None = None,
        checkpoint_id: str | None = None,
    ) -> str:
        return await self.store.put(
            thread_id,
            state,
            metadata,
            checkpoint_id=checkpoint_id,
            parent_checkpoint_id=parent,
            new_channel_values=partial_writes,
        )

    async def record(
        self,
        thread_id: str,
        checkpoint_id: str,
        task_id: str,
        writes: Iterable[tuple[str, Any]],
    ) -> None:
        """Record a partial write made by one task mid-step."""
        await self.store.write_buffer.stage(thread_id, checkpoint_id, task_id, writes)
