"""Project Schemas - projects and their membership."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from alphacore.core.domain_types import ProjectRole, ProjectStatus
from alphacore.schemas.common import ORMModel, blank_to_none
from alphacore.schemas.user import UserBrief


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    status: ProjectStatus = ProjectStatus.PLANNING
    color: str = Field("#3b82f6", min_length=1, max_length=20)
    budget: float | None = Field(None, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None

    @field_validator("description", "start_date", "end_date", "budget", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)


class ProjectUpdate(ProjectCreate):
    pass


class MemberCreate(BaseModel):
    user_id: UUID
    role: ProjectRole = ProjectRole.MEMBER


class MemberUpdate(BaseModel):
    role: ProjectRole


class MemberResponse(ORMModel):
    id: UUID
    project_id: UUID
    user_id: UUID
    role: str
    joined_at: datetime
    user: UserBrief


class ProjectResponse(ORMModel):
    id: UUID
    name: str
    description: str | None = None
    status: str
    color: str
    budget: float | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
    members: list[MemberResponse]
