"""Category Routes - workspace-wide income/expense categories.

Invariants:
    - A category still referenced by a transaction cannot be deleted (CATEGORY_IN_USE)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.api.routes.lookups import get_or_404
from alphacore.core.domain_types import TransactionType
from alphacore.core.errors import BusinessRuleError
from alphacore.infrastructure.database import get_db
from alphacore.models.category import Category
from alphacore.models.transaction import Transaction
from alphacore.models.user import User
from alphacore.schemas.finance import CategoryCreate, CategoryResponse

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    type_filter: TransactionType | None = Query(None, alias="type"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Category).order_by(Category.created_at.desc())
    if type_filter is not None:
        query = query.where(Category.type == type_filter.value)
    return (await db.execute(query)).scalars().all()


@router.post(
    "", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED,
)
async def create_category(
    body: CategoryCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    category = Category(
        name=body.name, type=body.type.value, color=body.color, icon=body.icon,
    )
    db.add(category)
    await db.commit()
    return category


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(db, Category, category_id, "Category")


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    body: CategoryCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    category = await get_or_404(db, Category, category_id, "Category")
    category.name = body.name
    category.type = body.type.value
    category.color = body.color
    category.icon = body.icon
    await db.commit()
    return category


@router.delete("/{category_id}")
async def delete_category(
    category_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    category = await get_or_404(db, Category, category_id, "Category")
    in_use = (await db.execute(
        select(func.count())
        .select_from(Transaction)
        .where(Transaction.category_id == category_id),
    )).scalar_one()
    if in_use:
        raise BusinessRuleError(
            f"Category is used by {in_use} transaction(s)", "CATEGORY_IN_USE",
        )
    await db.delete(category)
    await db.commit()
    return {"success": True}
