"""Invoice Routes - client invoices with line items.

Invariants:
    - Scoped by user_filter exactly like transactions (out of scope = 404)
    - New invoices get the next FTR-NNNNN number and start as DRAFT
    - A number collision between concurrent creates is a 409, never a duplicate
    - PUT replaces every item; status is optional on PUT
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.core.dates import to_utc
from alphacore.core.domain_types import ActivityAction, EntityType, InvoiceStatus
from alphacore.core.errors import ConflictError, ResourceNotFoundError
from alphacore.core.invoicing import next_invoice_number
from alphacore.core.permissions import user_filter
from alphacore.infrastructure.database import get_db
from alphacore.models.invoice import Invoice, InvoiceItem
from alphacore.models.user import User
from alphacore.schemas.finance import InvoiceCreate, InvoiceResponse, InvoiceUpdate
from alphacore.services.activity import log_activity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/invoices", tags=["invoices"])


async def _get_scoped(db: AsyncSession, invoice_id: UUID, user: User) -> Invoice:
    query = (
        select(Invoice)
        .where(Invoice.id == invoice_id)
        .execution_options(populate_existing=True)
    )
    owner = user_filter(user)
    if owner is not None:
        query = query.where(Invoice.user_id == owner)
    invoice = (await db.execute(query)).scalar_one_or_none()
    if invoice is None:
        raise ResourceNotFoundError("Invoice", str(invoice_id))
    return invoice


async def _next_number(db: AsyncSession) -> str:
    # Longer numbers are larger: FTR-100000 must outrank FTR-99999
    highest = (await db.execute(
        select(Invoice.number)
        .order_by(func.length(Invoice.number).desc(), Invoice.number.desc())
        .limit(1),
    )).scalar_one_or_none()
    return next_invoice_number([highest])


def _build_items(body: InvoiceCreate) -> list[InvoiceItem]:
    return [
        InvoiceItem(
            description=i.description, quantity=i.quantity, unit_price=i.unit_price,
        )
        for i in body.items
    ]


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    status_filter: InvoiceStatus | None = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Invoice).order_by(Invoice.created_at.desc())
    owner = user_filter(user)
    if owner is not None:
        query = query.where(Invoice.user_id == owner)
    if status_filter is not None:
        query = query.where(Invoice.status == status_filter.value)
    return (await db.execute(query)).scalars().all()


@router.post(
    "", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    body: InvoiceCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = Invoice(
        number=await _next_number(db),
        status=InvoiceStatus.DRAFT.value,
        client_name=body.client_name,
        client_email=body.client_email,
        issue_date=to_utc(body.issue_date),
        due_date=to_utc(body.due_date),
        notes=body.notes,
        user_id=user.id,
        items=_build_items(body),
    )
    user_id = user.id
    db.add(invoice)
    try:
        await db.flush()
        log_activity(
            db, ActivityAction.CREATED, EntityType.INVOICE, invoice.id, user.id,
            {"number": invoice.number, "total": invoice.total},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Invoice number collision", extra={"user_id": str(user_id)})
        raise ConflictError(
            "Invoice number already taken, please retry", "INVOICE_NUMBER_TAKEN",
        )
    return await _get_scoped(db, invoice.id, user)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _get_scoped(db, invoice_id, user)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: UUID,
    body: InvoiceUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = await _get_scoped(db, invoice_id, user)
    invoice.client_name = body.client_name
    invoice.client_email = body.client_email
    invoice.issue_date = to_utc(body.issue_date)
    invoice.due_date = to_utc(body.due_date)
    invoice.notes = body.notes
    if body.status is not None:
        invoice.status = body.status.value
    invoice.items = _build_items(body)
    log_activity(
        db, ActivityAction.UPDATED, EntityType.INVOICE, invoice.id, user.id,
        {"number": invoice.number, "status": invoice.status},
    )
    await db.commit()
    return await _get_scoped(db, invoice.id, user)


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = await _get_scoped(db, invoice_id, user)
    log_activity(
        db, ActivityAction.DELETED, EntityType.INVOICE, invoice.id, user.id,
        {"number": invoice.number},
    )
    await db.delete(invoice)
    await db.commit()
    return {"success": True}
