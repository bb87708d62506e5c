from .errors import (
    CheckpointError,
    CorruptionError,
    InvalidArgument,
    MissingThread,
    SerializationError,
    StoreUnavailable,
    is_retryable,
)
from .ids import generate_checkpoint_id, generate_task_id
from .records import CheckpointAddress, CheckpointTuple, PendingWrite, ResumableState
from .saver import SqlCheckpointSaver
from .serializer import CheckpointSerializer, SerializedValue
from .session import ThreadSession
from .store import CheckpointStore
from .write_buffer import WriteBuffer

__all__ = [
    "CheckpointAddress",
    "CheckpointError",
    "CheckpointSerializer",
    "CheckpointStore",
    "CheckpointTuple",
    "CorruptionError",
    "InvalidArgument",
    "MissingThread",
    "PendingWrite",
    "ResumableState",
    "SerializationError",
    "SerializedValue",
    "SqlCheckpointSaver",
    "StoreUnavailable",
    "ThreadSession",
    "WriteBuffer",
    "generate_checkpoint_id",
    "generate_task_id",
    "is_retryable",
]
