"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from clinic_cash.models.base import Base
from clinic_cash.models.enums import LedgerKind, PaymentMethod
from clinic_cash.models.visit import Visit, VisitPayment
from clinic_cash.models.expense import Expense
from clinic_cash.models.ledger_record import LedgerRecord
from clinic_cash.models.cash_closing import CashClosing

__all__ = [
    "Base",
    "LedgerKind",
    "PaymentMethod",
    "Visit",
    "VisitPayment",
    "Expense",
    "LedgerRecord",
    "CashClosing",
]
