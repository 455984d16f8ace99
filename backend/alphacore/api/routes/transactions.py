"""Transaction Routes - income/expense entries with paging and filters.

Invariants:
    - Non-admins only ever see or touch their own transactions (user_filter);
      anything outside that scope is a 404, not a 403
    - Dates are normalized to UTC before they are stored
    - Every create/update/delete writes an activity entry in the same commit
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.api.routes.lookups import get_or_404
from alphacore.core.dates import to_utc
from alphacore.core.domain_types import (
    ActivityAction, EntityType, TransactionType,
)
from alphacore.core.errors import ResourceNotFoundError
from alphacore.core.pagination import page_offset, pagination_meta
from alphacore.core.permissions import user_filter
from alphacore.infrastructure.database import get_db
from alphacore.models.category import Category
from alphacore.models.transaction import Transaction
from alphacore.models.user import User
from alphacore.schemas.finance import TransactionCreate, TransactionResponse
from alphacore.services.activity import log_activity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


async def _get_scoped(
    db: AsyncSession, transaction_id: UUID, user: User,
) -> Transaction:
    query = (
        select(Transaction)
        .where(Transaction.id == transaction_id)
        .execution_options(populate_existing=True)
    )
    owner = user_filter(user)
    if owner is not None:
        query = query.where(Transaction.user_id == owner)
    transaction = (await db.execute(query)).scalar_one_or_none()
    if transaction is None:
        raise ResourceNotFoundError("Transaction", str(transaction_id))
    return transaction


@router.get("")
async def list_transactions(
    type_filter: TransactionType | None = Query(None, alias="type"),
    category_id: UUID | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    conditions = []
    owner = user_filter(user)
    if owner is not None:
        conditions.append(Transaction.user_id == owner)
    if type_filter is not None:
        conditions.append(Transaction.type == type_filter.value)
    if category_id is not None:
        conditions.append(Transaction.category_id == category_id)
    if start_date is not None:
        conditions.append(Transaction.date >= to_utc(start_date))
    if end_date is not None:
        conditions.append(Transaction.date <= to_utc(end_date))

    total = (await db.execute(
        select(func.count()).select_from(Transaction).where(*conditions),
    )).scalar_one()
    rows = (await db.execute(
        select(Transaction)
        .where(*conditions)
        .order_by(Transaction.date.desc())
        .offset(page_offset(page, limit))
        .limit(limit),
    )).scalars().all()

    return {
        "transactions": [
            TransactionResponse.model_validate(t).model_dump(mode="json")
            for t in rows
        ],
        "pagination": pagination_meta(total, page, limit),
    }


@router.post(
    "", response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    body: TransactionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_or_404(db, Category, body.category_id, "Category")
    transaction = Transaction(
        type=body.type.value,
        amount=body.amount,
        description=body.description,
        date=to_utc(body.date),
        category_id=body.category_id,
        user_id=user.id,
    )
    db.add(transaction)
    await db.flush()
    log_activity(
        db, ActivityAction.CREATED, EntityType.TRANSACTION, transaction.id,
        user.id, {"type": transaction.type, "amount": transaction.amount},
    )
    await db.commit()
    return await _get_scoped(db, transaction.id, user)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _get_scoped(db, transaction_id, user)


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: UUID,
    body: TransactionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    transaction = await _get_scoped(db, transaction_id, user)
    await get_or_404(db, Category, body.category_id, "Category")
    transaction.type = body.type.value
    transaction.amount = body.amount
    transaction.description = body.description
    transaction.date = to_utc(body.date)
    transaction.category_id = body.category_id
    log_activity(
        db, ActivityAction.UPDATED, EntityType.TRANSACTION, transaction.id,
        user.id, {"type": transaction.type, "amount": transaction.amount},
    )
    await db.commit()
    return await _get_scoped(db, transaction.id, user)


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    transaction = await _get_scoped(db, transaction_id, user)
    log_activity(
        db, ActivityAction.DELETED, EntityType.TRANSACTION, transaction.id,
        user.id, {"description": transaction.description},
    )
    await db.delete(transaction)
    await db.commit()
    return {"success": True}
