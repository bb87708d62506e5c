from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CheckpointAddress(BaseModel):
    """Where a checkpoint lives: enough to address it in a later ``get``."""

    model_config = ConfigDict(frozen=True)

    thread_id: str
    checkpoint_id: str
    checkpoint_ns: str = ""

    def to_config(self) -> dict[str, Any]:
        """Render as a LangGraph ``RunnableConfig`` mapping."""
        return {
            "configurable": {
                "thread_id": self.thread_id,
                "checkpoint_ns": self.checkpoint_ns,
                "checkpoint_id": self.checkpoint_id,
            }
        }


class PendingWrite(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_id: str
    channel: str
    value: Any


class CheckpointTuple(BaseModel):
    """Everything needed to resume execution from one checkpoint."""

    config: CheckpointAddress
    checkpoint: Any
    metadata: Any
    parent_config: CheckpointAddress | None = None
    pending_writes: list[PendingWrite] = Field(default_factory=list)
    # Always UTC-aware; pass back as ``before`` to page further into history
    created_at: datetime


class ResumableState(BaseModel):
    thread_id: str
    checkpoint_id: str | None = None
    state: Any = Field(default_factory=dict)
    metadata: Any = Field(default_factory=dict)
    pending_writes: list[PendingWrite] = Field(default_factory=list)

    @property
    def is_new(self) -> bool:
        """True when the thread has no checkpoint yet."""
        return self.checkpoint_id is None
