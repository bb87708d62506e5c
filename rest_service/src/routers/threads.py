from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Query, Response, status
from shared_models import LogEventType
from shared_models.api_schemas import ThreadCreate, ThreadRead, ThreadUpdate

import crud.thread as thread_crud
from dependencies import SessionDep
from models.thread import Thread

logger = structlog.get_logger()
router = APIRouter(prefix="/threads", tags=["threads"])


async def _get_thread_or_404(session: SessionDep, thread_id: str) -> Thread:
    db_thread = await thread_crud.get_thread(db=session, thread_id=thread_id)
    if db_thread is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found"
        )
    return db_thread


@router.post("/", response_model=ThreadRead, status_code=status.HTTP_201_CREATED)
async def create_thread_endpoint(thread_in: ThreadCreate, session: SessionDep) -> Thread:
    db_thread = await thread_crud.create_thread(db=session, thread_in=thread_in)
    logger.info(
        "Thread created",
        event_type=LogEventType.THREAD_CREATED,
        thread_id=db_thread.id,
        user_id=db_thread.user_id,
    )
    return db_thread


@router.get("/", response_model=list[ThreadRead])
async def list_threads_endpoint(
    session: SessionDep,
    user_id: Annotated[str, Query()],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[Thread]:
    return await thread_crud.get_user_threads(
        db=session, user_id=user_id, skip=offset, limit=limit
    )


@router.get("/{thread_id}", response_model=ThreadRead)
async def get_thread_endpoint(thread_id: str, session: SessionDep) -> Thread:
    return await _get_thread_or_404(session, thread_id)


@router.patch("/{thread_id}", response_model=ThreadRead)
async def update_thread_endpoint(
    thread_id: str, thread_in: ThreadUpdate, session: SessionDep
) -> Thread:
    db_thread = await _get_thread_or_404(session, thread_id)
    return await thread_crud.update_thread(
        db=session, db_thread=db_thread, thread_in=thread_in
    )


@router.delete("/{thread_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_thread_endpoint(
    thread_id: str,
    session: SessionDep,
    permanent: Annotated[bool, Query()] = False,
) -> Response:
    """Soft-delete a thread; ``permanent=true`` also drops its checkpoint history."""
    if permanent:
        if not await thread_crud.delete_thread(db=session, thread_id=thread_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found"
            )
    else:
        db_thread = await _get_thread_or_404(session, thread_id)
        await thread_crud.soft_delete_thread(db=session, db_thread=db_thread)

    logger.info(
        "Thread deleted",
        event_type=LogEventType.THREAD_DELETED,
        thread_id=thread_id,
        permanent=permanent,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
