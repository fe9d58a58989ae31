"""
Pydantic schemas for cash drawer operations.

These define the API contract. They are separate from the
database models because the API shape and the storage shape
are often different.
"""

import datetime as dt

from pydantic import BaseModel, Field

from clinic_cash.models.enums import LedgerKind

# Amount columns are 32-bit INTEGER.
MAX_AMOUNT = 2_147_483_647


# --- Request Schemas ---

class ManualDepositCreate(BaseModel):
    """
    Operator-entered movement (cash taken to the bank).

    kind is accepted so that the endpoint can refuse anything
    other than MANUAL_DEPOSIT explicitly instead of ignoring it.
    """
    date: dt.date
    kind: LedgerKind = LedgerKind.MANUAL_DEPOSIT
    amount: int = Field(gt=0, le=MAX_AMOUNT)
    description: str | None = Field(default=None, max_length=255)


class ManualDepositUpdate(BaseModel):
    amount: int = Field(gt=0, le=MAX_AMOUNT)
    description: str | None = Field(default=None, max_length=255)


class CloseDayRequest(BaseModel):
    date: dt.date
    counted_amount: int | None = Field(default=None, ge=0, le=MAX_AMOUNT)


# --- Response Schemas ---

class LedgerRecordResponse(BaseModel):
    id: int
    date: dt.date
    kind: LedgerKind
    amount: int
    description: str | None
    source_visit_payment_id: int | None
    source_expense_id: int | None
    is_editable: bool
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class PreviousClosingResponse(BaseModel):
    date: dt.date
    closing_amount: int


class DayBalanceResponse(BaseModel):
    date: dt.date
    previous_closing: int
    daily_delta: int
    current_balance: int
    total_income: int
    total_expense: int
    total_deposit: int
    records: list[LedgerRecordResponse]
    is_closed: bool


class CashClosingResponse(BaseModel):
    id: int
    date: dt.date
    closing_amount: int
    counted_amount: int | None
    discrepancy: int | None
    closed_at: dt.datetime

    model_config = {"from_attributes": True}
