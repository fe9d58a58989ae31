"""
Daily cash drawer closing (마감).

Closing a day stores a snapshot of its computed balance and,
optionally, the amount the operator actually counted. A closing
locks that day and every earlier one against cash-affecting
changes, which keeps the snapshot equal to what the records
would fold to.
"""

import datetime as dt

from sqlalchemy import Date, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from clinic_cash.models.base import Base


class CashClosing(Base):
    __tablename__ = "cash_closings"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(
        Date, unique=True, nullable=False, index=True
    )
    closing_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    counted_amount: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    closed_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow
    )

    @property
    def discrepancy(self) -> int | None:
        """Counted cash minus computed balance; None when not counted."""
        if self.counted_amount is None:
            return None
        return self.counted_amount - self.closing_amount

    def __repr__(self) -> str:
        return f"<CashClosing {self.date} {self.closing_amount}>"
