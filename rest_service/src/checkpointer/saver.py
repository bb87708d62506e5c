"""LangGraph checkpointer backed by the SQL checkpoint store."""

from collections import Counter
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Optional, Sequence, Tuple

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import (
    BaseCheckpointSaver,
    ChannelVersions,
    Checkpoint,
    CheckpointMetadata,
)
from langgraph.checkpoint.base import CheckpointTuple as GraphCheckpointTuple
from shared_models import LogEventType, get_logger

from .records import CheckpointTuple
from .store import CheckpointStore

logger = get_logger(__name__)


def _configurable(config: Optional[RunnableConfig]) -> Dict[str, Any]:
    if not config:
        return {}
    return config.get("configurable", {}) or {}


def _namespace(configurable: Dict[str, Any]) -> str:
    return configurable.get("checkpoint_ns") or ""


def _matches(metadata: Any, filter: Dict[str, Any]) -> bool:
    if not isinstance(metadata, dict):
        return False
    return all(metadata.get(key) == value for key, value in filter.items())


class SqlCheckpointSaver(BaseCheckpointSaver):
    """Plugs :class:`CheckpointStore` into a compiled LangGraph graph.

    Checkpoints are kept per ``checkpoint_ns``, so a subgraph sharing the
    parent's checkpointer never shadows the root graph's latest checkpoint.

    Pending writes are keyed by (task, channel): when one task writes the
    same channel several times in a single ``aput_writes`` call (several
    ``Send`` packets on the tasks channel, for instance) only the last value
    is kept, and a warning is logged.

    Only the async API is implemented; the graph must be driven with
    ``ainvoke``/``astream``.
    """

    store: CheckpointStore

    def __init__(self, store: CheckpointStore):
        super().__init__(serde=store.serializer.serde)
        self.store = store

    def _to_graph_tuple(self, item: CheckpointTuple) -> GraphCheckpointTuple:
        return GraphCheckpointTuple(
            config=item.config.to_config(),
            checkpoint=item.checkpoint,
            metadata=item.metadata,
            parent_config=item.parent_config.to_config() if item.parent_config else None,
            pending_writes=[
                (write.task_id, write.channel, write.value)
                for write in item.pending_writes
            ],
        )

    async def aget_tuple(self, config: RunnableConfig) -> Optional[GraphCheckpointTuple]:
        configurable = _configurable(config)
        thread_id = configurable.get("thread_id")
        if not thread_id:
            return None

        item = await self.store.get(
            thread_id,
            configurable.get("checkpoint_id"),
            checkpoint_ns=_namespace(configurable),
        )
        if item is None:
            return None
        return self._to_graph_tuple(item)

    async def alist(
        self,
        config: Optional[RunnableConfig],
        *,
        filter: Optional[Dict[str, Any]] = None,
        before: Optional[RunnableConfig] = None,
        limit: Optional[int] = None,
    ) -> AsyncIterator[GraphCheckpointTuple]:
        """List one namespace's checkpoints newest first, paging through the store."""
        configurable = _configurable(config)
        thread_id = configurable.get("thread_id")
        if not thread_id:
            return
        checkpoint_ns = _namespace(configurable)

        cursor = None
        before_id = _configurable(before).get("checkpoint_id")
        if before_id:
            anchor = await self.store.get(
                thread_id, before_id, checkpoint_ns=checkpoint_ns
            )
            if anchor is None:
                return
            cursor = anchor.created_at

        remaining = limit
        page_size = max(self.store.default_list_limit, 1)
        while remaining is None or remaining > 0:
            seen = 0
            page = self.store.list(
                thread_id, limit=page_size, before=cursor, checkpoint_ns=checkpoint_ns
            )
            async with aclosing(page):
                async for item in page:
                    seen += 1
                    cursor = item.created_at
                    if filter and not _matches(item.metadata, filter):
                        continue
                    yield self._to_graph_tuple(item)
                    if remaining is not None:
                        remaining -= 1
                        if remaining == 0:
                            break
            if seen < page_size:
                return

    async def aput(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        """Save a checkpoint; its parent is the checkpoint named in ``config``."""
        configurable = _configurable(config)
        checkpoint_ns = _namespace(configurable)
        checkpoint_id = await self.store.put(
            configurable.get("thread_id"),
            checkpoint,
            metadata,
            checkpoint_id=checkpoint["id"],
            parent_checkpoint_id=configurable.get("checkpoint_id"),
            checkpoint_ns=checkpoint_ns,
        )
        return {
            "configurable": {
                "thread_id": configurable["thread_id"],
                "checkpoint_ns": checkpoint_ns,
                "checkpoint_id": checkpoint_id,
            }
        }

    async def aput_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[Tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        configurable = _configurable(config)
        repeated = sorted(
            channel
            for channel, count in Counter(channel for channel, _ in writes).items()
            if count > 1
        )
        if repeated:
            logger.warning(
                "Repeated channel writes collapsed to the last value",
                event_type=LogEventType.WARNING,
                thread_id=configurable.get("thread_id"),
                checkpoint_id=configurable.get("checkpoint_id"),
                task_id=task_id,
                channels=repeated,
            )
        await self.store.write_buffer.stage(
            configurable.get("thread_id"),
            configurable.get("checkpoint_id"),
            task_id,
            writes,
            checkpoint_ns=_namespace(configurable),
        )
