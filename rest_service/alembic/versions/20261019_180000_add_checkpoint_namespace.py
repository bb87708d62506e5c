"""Add checkpoint_ns to checkpoints and checkpoint_writes

Revision ID: add_checkpoint_namespace
Revises: create_checkpoint_tables
Create Date: 2026-10-19

Existing rows land in the root namespace ("").
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "add_checkpoint_namespace"
down_revision = "create_checkpoint_tables"
branch_labels = None
depends_on = None


def upgrade() -> None:
    for table in ("checkpoints", "checkpoint_writes"):
        op.add_column(
            table,
            sa.Column("checkpoint_ns", sa.String(), nullable=False, server_default=""),
        )

    op.drop_constraint("checkpoints_pkey", "checkpoints", type_="primary")
    op.create_primary_key(
        "checkpoints_pkey",
        "checkpoints",
        ["thread_id", "checkpoint_ns", "checkpoint_id"],
    )
    op.drop_index("ix_checkpoints_thread_id_created_at", table_name="checkpoints")
    op.create_index(
        "ix_checkpoints_thread_id_ns_created_at",
        "checkpoints",
        ["thread_id", "checkpoint_ns", "created_at"],
    )

    op.drop_constraint("checkpoint_writes_pkey", "checkpoint_writes", type_="primary")
    op.create_primary_key(
        "checkpoint_writes_pkey",
        "checkpoint_writes",
        ["thread_id", "checkpoint_ns", "checkpoint_id", "task_id", "channel"],
    )
    op.drop_index(
        "ix_checkpoint_writes_thread_id_checkpoint_id", table_name="checkpoint_writes"
    )
    op.create_index(
        "ix_checkpoint_writes_thread_id_ns_checkpoint_id",
        "checkpoint_writes",
        ["thread_id", "checkpoint_ns", "checkpoint_id"],
    )


def downgrade() -> None:
    # Subgraph history has no place in the old key
    op.execute("DELETE FROM checkpoint_writes WHERE checkpoint_ns <> ''")
    op.execute("DELETE FROM checkpoints WHERE checkpoint_ns <> ''")

    op.drop_index(
        "ix_checkpoint_writes_thread_id_ns_checkpoint_id", table_name="checkpoint_writes"
    )
    op.drop_constraint("checkpoint_writes_pkey", "checkpoint_writes", type_="primary")
    op.create_primary_key(
        "checkpoint_writes_pkey",
        "checkpoint_writes",
        ["thread_id", "checkpoint_id", "task_id", "channel"],
    )
    op.create_index(
        "ix_checkpoint_writes_thread_id_checkpoint_id",
        "checkpoint_writes",
        ["thread_id", "checkpoint_id"],
    )

    op.drop_index("ix_checkpoints_thread_id_ns_created_at", table_name="checkpoints")
    op.drop_constraint("checkpoints_pkey", "checkpoints", type_="primary")
    op.create_primary_key(
        "checkpoints_pkey", "checkpoints", ["thread_id", "checkpoint_id"]
    )
    op.create_index(
        "ix_checkpoints_thread_id_created_at",
        "checkpoints",
        ["thread_id", "created_at"],
    )

    for table in ("checkpoint_writes", "checkpoints"):
        op.drop_column(table, "checkpoint_ns")
