"""Entity model and SQLModel table definitions.

`StoryRecord` and `TaskRecord` map to the `stories` and `tasks` tables and
never leave the repository layer. Callers get `Story` and `Task`, frozen
pydantic values copied out of the rows, so nothing they hold is attached
to a live session.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Status(str, Enum):
    """Task completion status. Both transitions are always allowed."""
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"

    def __str__(self) -> str:
        return self.value


class StoryRecord(SQLModel, table=True):
    """A row in `stories`. `deleted_at` is set instead of removing the row."""
    __tablename__ = "stories"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(nullable=False)
    owner: str = Field(index=True, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None)


class TaskRecord(SQLModel, table=True):
    """A row in `tasks`. `status` holds one of the two `Status` tokens."""
    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    story_id: uuid.UUID = Field(foreign_key="stories.id", index=True, nullable=False)
    name: str = Field(nullable=False)
    status: str = Field(default=Status.INCOMPLETE.value, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None)


class Story(BaseModel):
    """A top-level unit of work grouped by `owner`."""
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    owner: str


class Task(BaseModel):
    """An actionable step belonging to exactly one story."""
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    story_id: uuid.UUID
    name: str
    status: Status
