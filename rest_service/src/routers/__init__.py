from . import checkpoints, threads

__all__ = ["checkpoints", "threads"]
