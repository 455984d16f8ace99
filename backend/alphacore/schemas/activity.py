"""Activity Log Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from alphacore.schemas.common import ORMModel
from alphacore.schemas.user import UserBrief


class ActivityResponse(ORMModel):
    id: UUID
    action: str
    entity_type: str
    entity_id: str
    user_id: UUID
    metadata: dict | None = Field(None, validation_alias="details")
    created_at: datetime
    user: UserBrief
