from .base import BaseModel
from .checkpoint import Checkpoint, CheckpointWrite
from .thread import Thread

__all__ = [
    "BaseModel",
    "Thread",
    "Checkpoint",
    "CheckpointWrite",
]
