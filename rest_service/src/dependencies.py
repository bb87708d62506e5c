"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from checkpointer import CheckpointStore
from config import settings
from database import AsyncSessionLocal, get_session

SessionDep = Annotated[AsyncSession, Depends(get_session)]

_store: CheckpointStore | None = None


def get_checkpoint_store() -> CheckpointStore:
    """Process-wide store bound to the application's session factory."""
    global _store
    if _store is None:
        _store = CheckpointStore.from_settings(AsyncSessionLocal, settings)
    return _store


StoreDep = Annotated[CheckpointStore, Depends(get_checkpoint_store)]
