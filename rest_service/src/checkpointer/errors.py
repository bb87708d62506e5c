"""Errors raised by the checkpoint store.

``get``/``resume`` on an empty thread is not an error: they return ``None`` /
an empty state.
"""


class CheckpointError(Exception):
    """Base exception for checkpoint loading/saving errors."""


class InvalidArgument(CheckpointError, ValueError):
    """A required key was missing or empty."""


class MissingThread(InvalidArgument):
    """thread_id was not supplied, or names a thread that does not exist."""


class SerializationError(CheckpointError):
    """A value could not be encoded (e.g. it holds a live handle)."""


class CorruptionError(CheckpointError):
    """Stored bytes could not be decoded."""


class StoreUnavailable(CheckpointError):
    """The backing database failed.

    Every write is an upsert on its natural key, so the whole operation can be
    retried with backoff.
    """


def is_retryable(error: Exception) -> bool:
    """
    Check if an error should trigger a retry

    Args:
        error: The exception to check

    Returns:
        True if the error should trigger a retry
    """
    return isinstance(error, StoreUnavailable)
