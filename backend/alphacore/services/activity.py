"""Activity Logging - append audit entries inside the caller's unit of work.

Invariants:
    - log_activity never commits: the entry lands (or rolls back) with the change it records
    - Enum arguments are stored by value
"""

import uuid
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.models.activity_log import ActivityLog


def _value(v):
    return v.value if isinstance(v, Enum) else v


def log_activity(
    db: AsyncSession,
    action,
    entity_type,
    entity_id,
    user_id: uuid.UUID,
    metadata: dict | None = None,
) -> ActivityLog:
    entry = ActivityLog(
        action=_value(action),
        entity_type=_value(entity_type),
        entity_id=str(entity_id),
        user_id=user_id,
        details=(
            {k: _value(v) for k, v in metadata.items()} if metadata else None
        ),
    )
    db.add(entry)
    return entry
