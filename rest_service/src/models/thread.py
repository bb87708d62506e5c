import uuid

from sqlalchemy import Boolean, Column, String
from sqlmodel import Field

from .base import BaseModel


class Thread(BaseModel, table=True):
    """A conversation owned by one user; scopes every checkpoint."""

    __tablename__ = "threads"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        sa_column=Column(String, primary_key=True),
    )
    user_id: str = Field(sa_column=Column(String, nullable=False, index=True))
    title: str = Field(default="New Chat", max_length=255)
    is_deleted: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False, index=True),
    )
