"""Read-only view of a thread's checkpoint history."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from shared_models.api_schemas import (
    CheckpointPage,
    CheckpointSummaryRead,
    PendingWriteRead,
)

import crud.thread as thread_crud
from checkpointer import CheckpointTuple
from dependencies import SessionDep, StoreDep

router = APIRouter(prefix="/threads/{thread_id}/checkpoints", tags=["checkpoints"])


def _to_summary(item: CheckpointTuple) -> CheckpointSummaryRead:
    return CheckpointSummaryRead(
        thread_id=item.config.thread_id,
        checkpoint_id=item.config.checkpoint_id,
        parent_checkpoint_id=(
            item.parent_config.checkpoint_id if item.parent_config else None
        ),
        checkpoint_metadata=item.metadata,
        pending_writes=[
            PendingWriteRead(task_id=write.task_id, channel=write.channel)
            for write in item.pending_writes
        ],
        created_at=item.created_at,
    )


async def _ensure_thread(session: SessionDep, thread_id: str) -> None:
    db_thread = await thread_crud.get_thread(
        db=session, thread_id=thread_id, include_deleted=True
    )
    if db_thread is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found"
        )


@router.get("", response_model=CheckpointPage)
async def list_checkpoints_endpoint(
    thread_id: str,
    session: SessionDep,
    store: StoreDep,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    before: Annotated[
        datetime | None,
        Query(description="Only checkpoints created strictly before this instant"),
    ] = None,
) -> CheckpointPage:
    await _ensure_thread(session, thread_id)
    page_size = limit or store.default_list_limit
    items = [
        _to_summary(item)
        async for item in store.list(thread_id, limit=page_size, before=before)
    ]
    next_before = items[-1].created_at if len(items) == page_size else None
    return CheckpointPage(items=items, next_before=next_before)


@router.get("/latest", response_model=CheckpointSummaryRead)
async def get_latest_checkpoint_endpoint(
    thread_id: str, session: SessionDep, store: StoreDep
) -> CheckpointSummaryRead:
    await _ensure_thread(session, thread_id)
    item = await store.get(thread_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Checkpoint not found for this thread",
        )
    return _to_summary(item)


@router.get("/{checkpoint_id}", response_model=CheckpointSummaryRead)
async def get_checkpoint_endpoint(
    thread_id: str, checkpoint_id: str, session: SessionDep, store: StoreDep
) -> CheckpointSummaryRead:
    await _ensure_thread(session, thread_id)
    item = await store.get(thread_id, checkpoint_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Checkpoint not found"
        )
    return _to_summary(item)
