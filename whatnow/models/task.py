from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, Index
from sqlmodel import SQLModel, Field

from whatnow.core.clock import utcnow
from whatnow.models.types import UTCDateTime


class TaskState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Task(SQLModel, table=True):
    """
    A single user-authored to-do item.
    - completed_at IS NULL  -> pending (eligible to be the current task)
    - archived_at NOT NULL  -> in the bin (only reachable from completed)
    - position orders pending tasks of one owner; ignored otherwise
    """
    __tablename__ = "task"

    __table_args__ = (
        Index("ix_task_owner_position", "owner_id", "position"),
        Index("ix_task_owner_completed", "owner_id", "completed_at"),
        Index("ix_task_owner_archived", "owner_id", "archived_at"),
    )

    task_id: UUID = Field(default_factory=uuid4, primary_key=True)
    owner_id: str = Field(nullable=False, max_length=64)
    text: str = Field(nullable=False)
    position: int = Field(default=0, nullable=False)
    # aware UTC on every dialect
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False),
    )
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(UTCDateTime(), nullable=True))
    archived_at: Optional[datetime] = Field(default=None, sa_column=Column(UTCDateTime(), nullable=True))

    @property
    def state(self) -> TaskState:
        if self.archived_at is not None:
            return TaskState.ARCHIVED
        if self.completed_at is not None:
            return TaskState.COMPLETED
        return TaskState.PENDING
