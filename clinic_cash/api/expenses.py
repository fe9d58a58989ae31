"""
Expense API endpoints.
"""

import datetime as dt

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from clinic_cash.exceptions import CashLedgerError
from clinic_cash.models.base import get_db
from clinic_cash.models.enums import PaymentMethod
from clinic_cash.services.expense_service import (
    DEFAULT_PAGE_SIZE,
    ExpenseService,
)
from clinic_cash.schemas.expense import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseListResponse,
    Pagination,
)

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseResponse, status_code=201)
def create_expense(
    request: ExpenseCreate,
    db: Session = Depends(get_db),
):
    """Register an expense. Cash expenses also enter the cash drawer."""
    service = ExpenseService(db)
    try:
        expense = service.create_expense(request)
        db.commit()
        return expense
    except CashLedgerError:
        db.rollback()
        raise


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    date_start: dt.date | None = None,
    date_end: dt.date | None = None,
    method: PaymentMethod | None = None,
    vendor: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """
    List expenses, newest first.

    A single-day query (date_start == date_end) is not paginated.
    """
    expenses, pagination = ExpenseService(db).list_expenses(
        date_start=date_start,
        date_end=date_end,
        method=method,
        vendor=vendor,
        page=page,
        limit=limit,
    )
    return ExpenseListResponse(
        data=[ExpenseResponse.model_validate(e) for e in expenses],
        pagination=Pagination(**pagination),
    )


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
):
    return ExpenseService(db).get_expense(expense_id)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    request: ExpenseUpdate,
    db: Session = Depends(get_db),
):
    service = ExpenseService(db)
    try:
        expense = service.update_expense(expense_id, request)
        db.commit()
        return expense
    except CashLedgerError:
        db.rollback()
        raise


@router.delete("/{expense_id}", status_code=204)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
):
    """Delete an expense and, for cash expenses, its cash record."""
    service = ExpenseService(db)
    try:
        service.delete_expense(expense_id)
        db.commit()
    except CashLedgerError:
        db.rollback()
        raise
    return Response(status_code=204)
