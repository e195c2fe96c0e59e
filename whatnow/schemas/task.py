from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskCreate(BaseModel):
    # any JSON value; the service answers 400 for anything but non-blank text
    text: Any = None


class ReorderRequest(BaseModel):
    # left untyped so a non-array payload reaches the service and comes back as a 400
    task_ids: Any = Field(default=None, alias="taskIds")

    model_config = ConfigDict(populate_by_name=True)


class TaskRead(BaseModel):
    id: UUID = Field(
        validation_alias=AliasChoices("task_id", "id"),
        serialization_alias="id",
    )
    text: str
    position: int
    created_at: datetime
    completed_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CompleteCurrentResponse(BaseModel):
    completed: TaskRead
    current: Optional[TaskRead] = None


class SuccessResponse(BaseModel):
    success: bool = True


class ArchiveResponse(SuccessResponse):
    archived: int = 0


class EmptyBinResponse(SuccessResponse):
    deleted: int = 0
