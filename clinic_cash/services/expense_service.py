"""
Expense service.

Cash expenses are mirrored in the cash drawer by one EXPENSE
record, kept in lockstep on create, edit and delete.
"""

import datetime as dt
import logging
import math

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_cash.exceptions import NotFound, PartialConsistencyError
from clinic_cash.models.enums import PaymentMethod
from clinic_cash.models.expense import Expense
from clinic_cash.schemas.expense import ExpenseCreate, ExpenseUpdate
from clinic_cash.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class ExpenseService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger_service = LedgerService(db)

    def create_expense(self, request: ExpenseCreate) -> Expense:
        expense = Expense(
            date=request.date,
            vendor=request.vendor,
            description=request.description,
            amount=request.amount,
            method=request.method,
            notes=request.notes,
        )
        self.db.add(expense)
        self.db.flush()

        self._sync_cash_record(expense)
        return expense

    def get_expense(self, expense_id: int) -> Expense:
        expense = self.db.get(Expense, expense_id)
        if not expense:
            raise NotFound("Expense", expense_id)
        return expense

    def update_expense(
        self, expense_id: int, request: ExpenseUpdate
    ) -> Expense:
        expense = self.get_expense(expense_id)
        for key, value in request.model_dump(exclude_unset=True).items():
            if key in ("date", "amount", "method") and value is None:
                continue
            setattr(expense, key, value)
        self.db.flush()

        self._sync_cash_record(expense)
        return expense

    def delete_expense(self, expense_id: int) -> None:
        expense = self.get_expense(expense_id)
        try:
            self.ledger_service.remove_for_expense(expense.id)
        except SQLAlchemyError as e:
            logger.error(
                "Cash record for expense %s could not be removed: %s",
                expense.id, e,
            )
            raise PartialConsistencyError(
                f"Cash record for expense {expense.id} could not be removed",
                details={"expense_id": expense.id},
            ) from e
        self.db.delete(expense)
        self.db.flush()

    def list_expenses(
        self,
        date_start: dt.date | None = None,
        date_end: dt.date | None = None,
        method: PaymentMethod | None = None,
        vendor: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[Expense], dict]:
        """
        Filter expenses, newest first.

        A single-day query (date_start == date_end) returns every
        match on one page; anything else is paginated.
        """
        query = select(Expense)
        if date_start:
            query = query.where(Expense.date >= date_start)
        if date_end:
            query = query.where(Expense.date <= date_end)
        if method:
            query = query.where(Expense.method == method)
        if vendor:
            query = query.where(Expense.vendor.ilike(f"%{vendor}%"))

        total = self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar()
        query = query.order_by(Expense.date.desc(), Expense.id.desc())

        if date_start and date_start == date_end:
            expenses = list(self.db.execute(query).scalars().all())
            pagination = {
                "total": len(expenses),
                "page": 1,
                "limit": len(expenses),
                "pages": 1,
            }
            return expenses, pagination

        expenses = self.db.execute(
            query.offset((page - 1) * limit).limit(limit)
        ).scalars().all()
        pagination = {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 0,
        }
        return list(expenses), pagination

    # --- Cash drawer bookkeeping ---

    @staticmethod
    def cash_description(expense: Expense) -> str:
        return expense.description or expense.vendor or "지출"

    def _sync_cash_record(self, expense: Expense) -> None:
        try:
            self.ledger_service.sync_expense(
                expense.id,
                expense.is_cash,
                expense.date,
                expense.amount,
                self.cash_description(expense),
            )
        except SQLAlchemyError as e:
            logger.error(
                "Expense %s saved but its cash record failed: %s",
                expense.id, e,
            )
            raise PartialConsistencyError(
                f"Expense {expense.id} could not be recorded in the "
                f"cash drawer",
                details={"expense_id": expense.id},
            ) from e
