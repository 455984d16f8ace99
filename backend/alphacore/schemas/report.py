"""Report Schedule Schemas.

Invariants:
    - recipients: at least one valid email address
    - ReportScheduleUpdate is partial (only sent fields change)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from alphacore.core.domain_types import ReportFrequency
from alphacore.schemas.common import ORMModel
from alphacore.schemas.user import UserBrief


class ReportScheduleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    frequency: ReportFrequency
    recipients: list[EmailStr] = Field(min_length=1)
    is_active: bool = True


class ReportScheduleUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    frequency: ReportFrequency | None = None
    recipients: list[EmailStr] | None = Field(None, min_length=1)
    is_active: bool | None = None


class ReportScheduleResponse(ORMModel):
    id: UUID
    name: str
    frequency: str
    recipients: list[str]
    is_active: bool
    last_run_at: datetime | None = None
    user_id: UUID
    created_at: datetime
    updated_at: datetime
    user: UserBrief
