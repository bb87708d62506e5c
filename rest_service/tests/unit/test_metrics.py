import pytest

from checkpointer import StoreUnavailable
from metrics import (
    CHECKPOINT_ID_PATTERN,
    UUID_PATTERN,
    checkpoint_operations_total,
    get_content_type,
    get_metrics,
    track_operation,
)


def _count(operation: str, status: str) -> float:
    return checkpoint_operations_total.labels(operation=operation, status=status)._value.get()


def test_track_operation_success():
    before = _count("unit-success", "success")

    with track_operation("unit-success"):
        pass

    assert _count("unit-success", "success") == before + 1


def test_track_operation_error_is_counted_and_reraised():
    before = _count("unit-error", "error")

    with pytest.raises(StoreUnavailable):
        with track_operation("unit-error"):
            raise StoreUnavailable("db down")

    assert _count("unit-error", "error") == before + 1


def test_endpoint_normalization():
    path = "/api/threads/0b7c3c4e-8f7e-4c8e-9a4f-1d2e3f4a5b6c/checkpoints/checkpoint_1767268800000_a1b2c3d4e"

    path = UUID_PATTERN.sub("/{id}", path)
    path = CHECKPOINT_ID_PATTERN.sub("/{checkpoint_id}", path)

    assert path == "/api/threads/{id}/checkpoints/{checkpoint_id}"


def test_exposition():
    assert b"checkpoint_operations_total" in get_metrics()
    assert get_content_type().startswith("text/plain")
