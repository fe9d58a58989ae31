"""
Expense model (지출내역).
"""

import datetime as dt

from sqlalchemy import (
    String, Date, DateTime, Integer, Text,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from clinic_cash.models.base import Base
from clinic_cash.models.enums import PaymentMethod


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    vendor: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            name="expense_method_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow
    )

    @property
    def is_cash(self) -> bool:
        return self.method == PaymentMethod.CASH

    def __repr__(self) -> str:
        return f"<Expense {self.date} {self.method.value} {self.amount}>"
