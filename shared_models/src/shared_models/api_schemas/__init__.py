# Re-export all api schemas for easier access from shared_models.api_schemas

from .base import BaseSchema, TimestampSchema
from .checkpoint import CheckpointPage, CheckpointSummaryRead, PendingWriteRead
from .thread import ThreadBase, ThreadCreate, ThreadRead, ThreadUpdate

__all__ = [
    # Base
    "BaseSchema",
    "TimestampSchema",
    # Checkpoint
    "CheckpointPage",
    "CheckpointSummaryRead",
    "PendingWriteRead",
    # Thread
    "ThreadBase",
    "ThreadCreate",
    "ThreadRead",
    "ThreadUpdate",
]
