from typing import Optional

from pydantic import Field

from .base import BaseSchema, TimestampSchema


class ThreadBase(BaseSchema):
    user_id: str
    title: str = Field(default="New Chat", max_length=255)


class ThreadCreate(ThreadBase):
    pass


class ThreadUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, max_length=255)


class ThreadRead(ThreadBase, TimestampSchema):
    id: str
    is_deleted: bool = False
