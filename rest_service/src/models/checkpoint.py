from sqlalchemy import Column, ForeignKey, Index, LargeBinary, String
from sqlmodel import Field

from .base import BaseModel


def _thread_fk_column() -> Column:
    return Column(
        String,
        ForeignKey("threads.id", ondelete="CASCADE"),
        primary_key=True,
    )


def _namespace_column() -> Column:
    # "" is the root graph; subgraphs write under "<node>:<task_id>"
    return Column(String, primary_key=True, server_default="")


class Checkpoint(BaseModel, table=True):
    """One immutable snapshot of agent execution state.

    Payload columns hold serializer output: a type tag plus the encoded bytes.
    """

    __tablename__ = "checkpoints"

    thread_id: str = Field(sa_column=_thread_fk_column())
    checkpoint_ns: str = Field(default="", sa_column=_namespace_column())
    checkpoint_id: str = Field(sa_column=Column(String, primary_key=True))
    parent_checkpoint_id: str | None = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    checkpoint_type: str = Field(sa_column=Column(String, nullable=False))
    checkpoint_data: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
    metadata_type: str = Field(sa_column=Column(String, nullable=False))
    checkpoint_metadata: bytes = Field(sa_column=Column(LargeBinary, nullable=False))

    __table_args__ = (
        Index(
            "ix_checkpoints_thread_id_ns_created_at",
            "thread_id",
            "checkpoint_ns",
            "created_at",
        ),
    )


class CheckpointWrite(BaseModel, table=True):
    """A staged channel value not yet folded into a later checkpoint."""

    __tablename__ = "checkpoint_writes"

    thread_id: str = Field(sa_column=_thread_fk_column())
    checkpoint_ns: str = Field(default="", sa_column=_namespace_column())
    checkpoint_id: str = Field(sa_column=Column(String, primary_key=True))
    task_id: str = Field(sa_column=Column(String, primary_key=True))
    channel: str = Field(sa_column=Column(String, primary_key=True))
    value_type: str = Field(sa_column=Column(String, nullable=False))
    value: bytes = Field(sa_column=Column(LargeBinary, nullable=False))

    __table_args__ = (
        Index(
            "ix_checkpoint_writes_thread_id_ns_checkpoint_id",
            "thread_id",
            "checkpoint_ns",
            "checkpoint_id",
        ),
    )
