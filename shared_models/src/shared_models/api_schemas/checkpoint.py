from datetime import datetime
from typing import Any, List, Optional

from pydantic import field_validator

from .base import BaseSchema, ensure_utc


class PendingWriteRead(BaseSchema):
    task_id: str
    channel: str


class CheckpointSummaryRead(BaseSchema):
    """History view of a checkpoint; the state blob itself is never exposed."""

    thread_id: str
    checkpoint_id: str
    parent_checkpoint_id: Optional[str] = None
    checkpoint_metadata: Any = None
    pending_writes: List[PendingWriteRead] = []
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_timezone_aware(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class CheckpointPage(BaseSchema):
    items: List[CheckpointSummaryRead]
    # Pass as `before` to fetch the next (older) page; None when exhausted
    next_before: Optional[datetime] = None
