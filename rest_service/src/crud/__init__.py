# This file makes Python treat the 'crud' directory as a package.

from . import checkpoint, thread

__all__ = [
    "checkpoint",
    "thread",
]
