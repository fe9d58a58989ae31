"""
Pydantic schemas for expenses.
"""

import datetime as dt

from pydantic import BaseModel, Field

from clinic_cash.models.enums import PaymentMethod
from clinic_cash.schemas.ledger import MAX_AMOUNT


class ExpenseCreate(BaseModel):
    date: dt.date
    vendor: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    amount: int = Field(gt=0, le=MAX_AMOUNT)
    method: PaymentMethod
    notes: str | None = None


class ExpenseUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""
    date: dt.date | None = None
    vendor: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    amount: int | None = Field(default=None, gt=0, le=MAX_AMOUNT)
    method: PaymentMethod | None = None
    notes: str | None = None


class ExpenseResponse(BaseModel):
    id: int
    date: dt.date
    vendor: str | None
    description: str | None
    amount: int
    method: PaymentMethod
    notes: str | None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ExpenseListResponse(BaseModel):
    data: list[ExpenseResponse]
    pagination: Pagination
