"""Unit tests for the typed checkpoint serializer."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from checkpointer import CheckpointSerializer, CorruptionError, SerializationError


class ExplodingSerde:
    def dumps_typed(self, obj):
        raise TypeError("cannot encode live handle")

    def loads_typed(self, data):
        raise ValueError("cannot decode")


class TestCheckpointSerializer:
    def test_encode_returns_type_tag_and_bytes(self):
        serializer = CheckpointSerializer()

        encoded = serializer.encode({"step": 1})

        assert isinstance(encoded.type, str)
        assert isinstance(encoded.data, bytes)

    def test_agent_state_with_messages_survives(self):
        serializer = CheckpointSerializer()
        state = {
            "messages": [HumanMessage(content="hi"), AIMessage(content="hello")],
            "step": 3,
        }

        decoded = serializer.decode(serializer.encode(state))

        assert decoded["step"] == 3
        assert [type(m) for m in decoded["messages"]] == [HumanMessage, AIMessage]
        assert [m.content for m in decoded["messages"]] == ["hi", "hello"]

    def test_decode_accepts_plain_tuple(self):
        serializer = CheckpointSerializer()
        encoded = serializer.encode([1, 2, 3])

        assert serializer.decode((encoded.type, encoded.data)) == [1, 2, 3]

    def test_encode_failure(self):
        serializer = CheckpointSerializer(serde=ExplodingSerde())

        with pytest.raises(SerializationError, match="dict"):
            serializer.encode({"handle": object()})

    def test_decode_failure(self):
        serializer = CheckpointSerializer(serde=ExplodingSerde())

        with pytest.raises(CorruptionError):
            serializer.decode(("msgpack", b"\x00"))

    def test_unknown_type_tag_is_corruption(self):
        serializer = CheckpointSerializer()

        with pytest.raises(CorruptionError, match="no-such-format"):
            serializer.decode(("no-such-format", b"{}"))
