import pytest

from checkpointer import (
    CheckpointError,
    CorruptionError,
    InvalidArgument,
    MissingThread,
    SerializationError,
    StoreUnavailable,
    is_retryable,
)


@pytest.mark.parametrize(
    "error, retryable",
    [
        (StoreUnavailable("db down"), True),
        (MissingThread("no thread"), False),
        (InvalidArgument("bad"), False),
        (SerializationError("bad value"), False),
        (CorruptionError("bad bytes"), False),
        (RuntimeError("other"), False),
    ],
)
def test_is_retryable(error, retryable):
    assert is_retryable(error) is retryable


def test_hierarchy():
    assert issubclass(MissingThread, InvalidArgument)
    assert issubclass(InvalidArgument, ValueError)
    for error in (InvalidArgument, SerializationError, CorruptionError, StoreUnavailable):
        assert issubclass(error, CheckpointError)
