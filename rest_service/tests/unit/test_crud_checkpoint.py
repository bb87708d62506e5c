# rest_service/tests/unit/test_crud_checkpoint.py
"""Unit tests for checkpoint statements.

The session is mocked; the statements handed to it are compiled against the
dialect the session claims to be bound to.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from crud import checkpoint as checkpoint_crud

NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _executed_sql(mock_session, dialect) -> str:
    stmt = mock_session.execute.call_args.args[0]
    return str(stmt.compile(dialect=dialect))


async def _upsert(mock_session):
    await checkpoint_crud.upsert_checkpoint(
        mock_session,
        thread_id="t-1",
        checkpoint_id="cp-1",
        parent_checkpoint_id=None,
        checkpoint_type="msgpack",
        checkpoint_data=b"\x80",
        metadata_type="msgpack",
        checkpoint_metadata=b"\x80",
        now=NOW,
    )


class TestUpsertCheckpoint:
    @pytest.mark.asyncio
    async def test_sqlite_upsert(self, mock_session):
        await _upsert(mock_session)

        sql = _executed_sql(mock_session, sqlite.dialect())
        assert "ON CONFLICT (thread_id, checkpoint_ns, checkpoint_id) DO UPDATE" in sql
        update_clause = sql.split("DO UPDATE", 1)[1]
        assert "checkpoint_data" in update_clause
        assert "updated_at" in update_clause
        assert "created_at" not in update_clause
        mock_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_postgres_upsert(self, mock_session):
        mock_session.get_bind.return_value.dialect.name = "postgresql"

        await _upsert(mock_session)

        sql = _executed_sql(mock_session, postgresql.dialect())
        assert "ON CONFLICT (thread_id, checkpoint_ns, checkpoint_id) DO UPDATE" in sql

    @pytest.mark.asyncio
    async def test_unsupported_dialect(self, mock_session):
        mock_session.get_bind.return_value.dialect.name = "mysql"

        with pytest.raises(NotImplementedError):
            await _upsert(mock_session)


class TestUpsertWrites:
    @pytest.mark.asyncio
    async def test_conflict_on_full_key(self, mock_session):
        row = {
            "thread_id": "t-1",
            "checkpoint_ns": "",
            "checkpoint_id": "cp-1",
            "task_id": "task-1",
            "channel": "messages",
            "value_type": "msgpack",
            "value": b"\x80",
            "created_at": NOW,
            "updated_at": NOW,
        }

        await checkpoint_crud.upsert_writes(mock_session, [row])

        sql = _executed_sql(mock_session, sqlite.dialect())
        assert (
            "ON CONFLICT (thread_id, checkpoint_ns, checkpoint_id, task_id, channel) DO UPDATE"
        ) in sql

    @pytest.mark.asyncio
    async def test_no_rows_no_statement(self, mock_session):
        await checkpoint_crud.upsert_writes(mock_session, [])

        mock_session.execute.assert_not_called()


class TestReads:
    @pytest.mark.asyncio
    async def test_latest_orders_by_created_at_then_id(self, mock_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.first.return_value = None
        mock_session.execute.return_value = mock_result

        result = await checkpoint_crud.get_latest_checkpoint(mock_session, "t-1")

        assert result is None
        sql = _executed_sql(mock_session, sqlite.dialect())
        assert "ORDER BY checkpoints.created_at DESC, checkpoints.checkpoint_id DESC" in sql
        assert "LIMIT" in sql

    @pytest.mark.asyncio
    async def test_list_with_before_is_strict(self, mock_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_session.execute.return_value = mock_result

        result = await checkpoint_crud.list_checkpoints(
            mock_session, "t-1", limit=5, before=NOW
        )

        assert result == []
        sql = _executed_sql(mock_session, sqlite.dialect())
        assert "checkpoints.created_at <" in sql
        assert "checkpoints.created_at <=" not in sql

    @pytest.mark.asyncio
    async def test_writes_ordered_by_task_then_channel(self, mock_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_session.execute.return_value = mock_result

        await checkpoint_crud.get_writes(mock_session, "t-1", "cp-1")

        sql = _executed_sql(mock_session, sqlite.dialect())
        assert "ORDER BY checkpoint_writes.task_id, checkpoint_writes.channel" in sql

    @pytest.mark.asyncio
    async def test_reads_filter_on_namespace(self, mock_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.first.return_value = None
        mock_result.scalars.return_value.all.return_value = []
        mock_session.execute.return_value = mock_result

        for read in (
            checkpoint_crud.get_latest_checkpoint(mock_session, "t-1", "inner:task-1"),
            checkpoint_crud.list_checkpoints(
                mock_session, "t-1", limit=5, checkpoint_ns="inner:task-1"
            ),
            checkpoint_crud.get_checkpoint(mock_session, "t-1", "cp-1", "inner:task-1"),
        ):
            await read
            stmt = mock_session.execute.call_args.args[0]
            assert "checkpoints.checkpoint_ns = :checkpoint_ns_1" in str(stmt.whereclause)
            assert stmt.compile().params["checkpoint_ns_1"] == "inner:task-1"

        await checkpoint_crud.get_writes(mock_session, "t-1", "cp-1", "inner:task-1")
        stmt = mock_session.execute.call_args.args[0]
        assert "checkpoint_writes.checkpoint_ns = :checkpoint_ns_1" in str(stmt.whereclause)
