"""Label Routes - shared task labels. Anyone may read; only admins create."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user, require_admin
from alphacore.core.errors import BusinessRuleError
from alphacore.infrastructure.database import get_db
from alphacore.models.task import Label
from alphacore.models.user import User
from alphacore.schemas.task import LabelCreate, LabelResponse

router = APIRouter(prefix="/api/v1/labels", tags=["labels"])


@router.get("", response_model=list[LabelResponse])
async def list_labels(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return (await db.execute(select(Label).order_by(Label.name))).scalars().all()


@router.post(
    "", response_model=LabelResponse, status_code=status.HTTP_201_CREATED,
)
async def create_label(
    body: LabelCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    existing = (await db.execute(
        select(Label.id).where(Label.name == body.name),
    )).first()
    if existing is not None:
        raise BusinessRuleError("Label already exists", "LABEL_EXISTS")
    label = Label(name=body.name, color=body.color)
    db.add(label)
    await db.commit()
    return label
