"""Create threads, checkpoints and checkpoint_writes tables.

Revision ID: create_checkpoint_tables
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "create_checkpoint_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "threads",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False, server_default="New Chat"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_threads_user_id", "threads", ["user_id"])
    op.create_index("ix_threads_is_deleted", "threads", ["is_deleted"])

    op.create_table(
        "checkpoints",
        sa.Column("thread_id", sa.String(), nullable=False),
        sa.Column("checkpoint_id", sa.String(), nullable=False),
        sa.Column("parent_checkpoint_id", sa.String(), nullable=True),
        sa.Column("checkpoint_type", sa.String(), nullable=False),
        sa.Column("checkpoint_data", sa.LargeBinary(), nullable=False),
        sa.Column("metadata_type", sa.String(), nullable=False),
        sa.Column("checkpoint_metadata", sa.LargeBinary(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["thread_id"], ["threads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("thread_id", "checkpoint_id", name="checkpoints_pkey"),
    )
    op.create_index(
        "ix_checkpoints_thread_id_created_at",
        "checkpoints",
        ["thread_id", "created_at"],
    )

    op.create_table(
        "checkpoint_writes",
        sa.Column("thread_id", sa.String(), nullable=False),
        sa.Column("checkpoint_id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("channel", sa.String(), nullable=False),
        sa.Column("value_type", sa.String(), nullable=False),
        sa.Column("value", sa.LargeBinary(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["thread_id"], ["threads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint(
            "thread_id",
            "checkpoint_id",
            "task_id",
            "channel",
            name="checkpoint_writes_pkey",
        ),
    )
    op.create_index(
        "ix_checkpoint_writes_thread_id_checkpoint_id",
        "checkpoint_writes",
        ["thread_id", "checkpoint_id"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_checkpoint_writes_thread_id_checkpoint_id", table_name="checkpoint_writes"
    )
    op.drop_table("checkpoint_writes")
    op.drop_index("ix_checkpoints_thread_id_created_at", table_name="checkpoints")
    op.drop_table("checkpoints")
    op.drop_index("ix_threads_is_deleted", table_name="threads")
    op.drop_index("ix_threads_user_id", table_name="threads")
    op.drop_table("threads")
