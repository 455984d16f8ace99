"""User Schemas - team administration payloads.

Invariants:
    - hashed_password never appears in a response model
    - UserUpdate.password: blank means "leave unchanged", otherwise 6+ chars
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from alphacore.core.domain_types import UserRole
from alphacore.schemas.common import ORMModel, blank_to_none


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)
    role: UserRole = UserRole.MEMBER

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str | None = None
    role: UserRole | None = None

    @field_validator("password", mode="before")
    @classmethod
    def blank_password(cls, v):
        return blank_to_none(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str | None) -> str | None:
        if v is not None and len(v) < 6:
            raise ValueError("password must be at least 6 characters")
        return v


class UserBrief(ORMModel):
    id: UUID
    name: str
    email: str
    image: str | None = None


class UserResponse(ORMModel):
    id: UUID
    name: str
    email: str
    image: str | None = None
    role: str
    created_at: datetime
