"""
Cash drawer API endpoints.

The API layer is thin: it handles HTTP concerns (status codes,
response formatting, the commit) and delegates all business
logic to the LedgerService. Any CashLedgerError rolls the
session back and is rendered by the global exception handler.
"""

import datetime as dt

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from clinic_cash.exceptions import CashLedgerError
from clinic_cash.models.base import get_db
from clinic_cash.services.ledger_service import LedgerService
from clinic_cash.schemas.ledger import (
    ManualDepositCreate,
    ManualDepositUpdate,
    CloseDayRequest,
    LedgerRecordResponse,
    PreviousClosingResponse,
    DayBalanceResponse,
    CashClosingResponse,
)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.get("", response_model=list[LedgerRecordResponse])
def list_records(
    date: dt.date = Query(...),
    db: Session = Depends(get_db),
):
    """All cash records for a day, in entry order."""
    return LedgerService(db).list_records(date)


@router.get("/previous", response_model=PreviousClosingResponse)
def get_previous_closing(
    date: dt.date = Query(...),
    db: Session = Depends(get_db),
):
    """
    Closing balance carried into the given day.

    This is the balance of the most recent earlier day with
    activity, or 0 when there is none.
    """
    service = LedgerService(db)
    return PreviousClosingResponse(
        date=date, closing_amount=service.previous_closing(date)
    )


@router.get("/balance", response_model=DayBalanceResponse)
def get_day_balance(
    date: dt.date = Query(...),
    db: Session = Depends(get_db),
):
    """Previous closing, the day's records and the folded balance."""
    service = LedgerService(db)
    balance = service.day_balance(date)
    return DayBalanceResponse(
        date=date,
        previous_closing=balance.previous_closing,
        daily_delta=balance.daily_delta,
        current_balance=balance.current_balance,
        total_income=balance.total_income,
        total_expense=balance.total_expense,
        total_deposit=balance.total_deposit,
        records=[
            LedgerRecordResponse.model_validate(r) for r in balance.records
        ],
        is_closed=service.is_closed(date),
    )


@router.post("", response_model=LedgerRecordResponse, status_code=201)
def create_manual_deposit(
    request: ManualDepositCreate,
    db: Session = Depends(get_db),
):
    """
    Add a manual deposit.

    Income and expense records cannot be created here; they
    come from cash visit payments and cash expenses.
    """
    service = LedgerService(db)
    try:
        record = service.create_manual(request)
        db.commit()
        return record
    except CashLedgerError:
        db.rollback()
        raise


# --- Closing ---
# Declared before /{record_id} so "close" is never read as an id.

@router.post("/close", response_model=CashClosingResponse, status_code=201)
def close_day(
    request: CloseDayRequest,
    db: Session = Depends(get_db),
):
    """Close the drawer for a day, locking it and every earlier day."""
    service = LedgerService(db)
    try:
        closing = service.close_day(request.date, request.counted_amount)
        db.commit()
        return closing
    except CashLedgerError:
        db.rollback()
        raise


@router.get("/close", response_model=CashClosingResponse)
def get_closing(
    date: dt.date = Query(...),
    db: Session = Depends(get_db),
):
    return LedgerService(db).get_closing(date)


@router.delete("/close", status_code=204)
def reopen_day(
    date: dt.date = Query(...),
    db: Session = Depends(get_db),
):
    """Reopen the most recently closed day."""
    service = LedgerService(db)
    try:
        service.reopen_day(date)
        db.commit()
    except CashLedgerError:
        db.rollback()
        raise
    return Response(status_code=204)


# --- Single record ---

@router.put("/{record_id}", response_model=LedgerRecordResponse)
def update_manual_deposit(
    record_id: int,
    request: ManualDepositUpdate,
    db: Session = Depends(get_db),
):
    """Edit a manual deposit. Linked records are refused."""
    service = LedgerService(db)
    try:
        record = service.update_manual(record_id, request)
        db.commit()
        return record
    except CashLedgerError:
        db.rollback()
        raise


@router.delete("/{record_id}", status_code=204)
def delete_manual_deposit(
    record_id: int,
    db: Session = Depends(get_db),
):
    """Delete a manual deposit. Linked records are refused."""
    service = LedgerService(db)
    try:
        service.delete_manual(record_id)
        db.commit()
    except CashLedgerError:
        db.rollback()
        raise
    return Response(status_code=204)
