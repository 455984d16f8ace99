"""Task Schemas - kanban cards, comments and labels.

Invariants:
    - Reorder order >= 0
    - A blank due_date clears the field
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from alphacore.core.domain_types import TaskPriority, TaskStatus
from alphacore.schemas.common import ORMModel, blank_to_none
from alphacore.schemas.user import UserBrief


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    project_id: UUID
    assignee_id: UUID | None = None
    label_ids: list[UUID] = Field(default_factory=list)

    @field_validator("description", "due_date", "assignee_id", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)


class TaskUpdate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None = None
    assignee_id: UUID | None = None
    label_ids: list[UUID] | None = None

    @field_validator("description", "due_date", "assignee_id", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)


class TaskReorder(BaseModel):
    task_id: UUID
    status: TaskStatus
    order: int = Field(ge=0)


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content cannot be empty or whitespace")
        return v


class CommentResponse(ORMModel):
    id: UUID
    content: str
    task_id: UUID
    user_id: UUID
    created_at: datetime
    user: UserBrief


class LabelCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    color: str = Field(min_length=1, max_length=20)


class LabelResponse(ORMModel):
    id: UUID
    name: str
    color: str


class TaskResponse(ORMModel):
    id: UUID
    title: str
    description: str | None = None
    status: str
    priority: str
    order: int
    due_date: datetime | None = None
    project_id: UUID
    assignee_id: UUID | None = None
    creator_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    assignee: UserBrief | None = None
    labels: list[LabelResponse] = []
