"""Finance Schemas - categories, transactions and invoices.

Invariants:
    - Transaction amount > 0 (sign comes from type)
    - Invoice needs at least one item; quantity > 0, unit_price >= 0
    - client_email is a valid address or blank (stored as None)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from alphacore.core.domain_types import InvoiceStatus, TransactionType
from alphacore.schemas.common import ORMModel, blank_to_none


# ─── Categories ────────────────────────────────────────────────

class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: TransactionType
    color: str = Field(min_length=1, max_length=20)
    icon: str | None = Field(None, max_length=50)


class CategoryResponse(ORMModel):
    id: UUID
    name: str
    type: str
    color: str
    icon: str | None = None
    created_at: datetime


# ─── Transactions ──────────────────────────────────────────────

class TransactionCreate(BaseModel):
    type: TransactionType
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    date: datetime
    category_id: UUID


class TransactionCategory(ORMModel):
    id: UUID
    name: str
    color: str
    type: str


class TransactionResponse(ORMModel):
    id: UUID
    type: str
    amount: float
    description: str
    date: datetime
    category_id: UUID
    user_id: UUID
    category: TransactionCategory
    created_at: datetime


# ─── Invoices ──────────────────────────────────────────────────

class InvoiceItemIn(BaseModel):
    description: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)


class InvoiceCreate(BaseModel):
    client_name: str = Field(min_length=1, max_length=200)
    client_email: EmailStr | None = None
    issue_date: datetime
    due_date: datetime
    notes: str | None = None
    items: list[InvoiceItemIn] = Field(min_length=1)

    @field_validator("client_email", "notes", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)


class InvoiceUpdate(InvoiceCreate):
    """Full replacement of header and items; status may change too."""
    status: InvoiceStatus | None = None


class InvoiceItemResponse(ORMModel):
    id: UUID
    description: str
    quantity: float
    unit_price: float


class InvoiceResponse(ORMModel):
    id: UUID
    number: str
    status: str
    client_name: str
    client_email: str | None = None
    issue_date: datetime
    due_date: datetime
    notes: str | None = None
    user_id: UUID
    items: list[InvoiceItemResponse]
    total: float
    created_at: datetime
