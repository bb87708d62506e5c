"""Serializer for checkpoint state, metadata and pending-write values.

Every payload goes through the same typed encoding and is stored as a
``(type, bytes)`` pair, so the read path never has to guess whether a value
was stored raw or pre-stringified.
"""

from typing import Any, NamedTuple

from langgraph.checkpoint.serde.base import SerializerProtocol
from langgraph.checkpoint.serde.jsonplus import JsonPlusSerializer

from .errors import CorruptionError, SerializationError


class SerializedValue(NamedTuple):
    type: str
    data: bytes


class CheckpointSerializer:
    """Typed encode/decode on top of a LangGraph serializer."""

    serde: SerializerProtocol

    def __init__(self, serde: SerializerProtocol | None = None):
        self.serde = serde or JsonPlusSerializer()

    def encode(self, value: Any) -> SerializedValue:
        try:
            type_, data = self.serde.dumps_typed(value)
        except Exception as e:
            raise SerializationError(
                f"Failed to serialize value of type {type(value).__name__}: {e}"
            ) from e
        return SerializedValue(type_, bytes(data))

    def decode(self, value: SerializedValue | tuple[str, bytes]) -> Any:
        type_, data = value
        try:
            return self.serde.loads_typed((type_, bytes(data)))
        except Exception as e:
            raise CorruptionError(
                f"Failed to deserialize value stored as {type_!r}: {e}"
            ) from e
