"""
Cash drawer record model.

One row per movement of cash in or out of the front-desk drawer.
Income and expense rows are generated by cash visit payments and
cash expenses and point back at them; manual deposit rows are
entered by the operator and point at nothing.

Amounts are always stored positive. Direction comes from kind.
"""

import datetime as dt

from sqlalchemy import (
    String, Date, DateTime, Integer, ForeignKey, CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from clinic_cash.models.base import Base
from clinic_cash.models.enums import LedgerKind


class LedgerRecord(Base):
    """
    A single cash movement on a calendar day.

    source_visit_payment_id and source_expense_id are lookup keys,
    not relationships: the visit payment or expense owns this row
    and the service deletes or updates it in lockstep with its
    owner. Nothing cascades from this side.
    """

    __tablename__ = "cash_records"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_cash_records_amount"),
        CheckConstraint(
            "source_visit_payment_id IS NULL OR source_expense_id IS NULL",
            name="ck_cash_records_single_source",
        ),
        CheckConstraint(
            "source_visit_payment_id IS NULL OR kind = 'INCOME'",
            name="ck_cash_records_visit_income",
        ),
        CheckConstraint(
            "source_expense_id IS NULL OR kind = 'EXPENSE'",
            name="ck_cash_records_expense_kind",
        ),
        CheckConstraint(
            "source_visit_payment_id IS NOT NULL "
            "OR source_expense_id IS NOT NULL "
            "OR kind = 'MANUAL_DEPOSIT'",
            name="ck_cash_records_manual_kind",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    kind: Mapped[LedgerKind] = mapped_column(
        SAEnum(LedgerKind, name="ledger_kind_enum", create_constraint=True),
        nullable=False,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    source_visit_payment_id: Mapped[int | None] = mapped_column(
        ForeignKey("visit_payments.id"), nullable=True, index=True
    )
    source_expense_id: Mapped[int | None] = mapped_column(
        ForeignKey("expenses.id"), nullable=True, index=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow
    )

    @property
    def is_linked(self) -> bool:
        return (
            self.source_visit_payment_id is not None
            or self.source_expense_id is not None
        )

    @property
    def is_editable(self) -> bool:
        """Only unlinked (manual deposit) rows may be edited directly."""
        return not self.is_linked

    def __repr__(self) -> str:
        return f"<LedgerRecord {self.date} {self.kind.value} {self.amount}>"
