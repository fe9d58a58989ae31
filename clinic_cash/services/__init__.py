"""Business logic services."""

from clinic_cash.services.balance import DayBalance, fold_day
from clinic_cash.services.ledger_service import LedgerService
from clinic_cash.services.visit_service import VisitService
from clinic_cash.services.expense_service import ExpenseService

__all__ = [
    "DayBalance",
    "fold_day",
    "LedgerService",
    "VisitService",
    "ExpenseService",
]
