"""
Patient visit (내원정보) and its payments.

A visit can be settled by several payments, each with its own
method. Only cash payments reach the cash drawer.
"""

import datetime as dt

from sqlalchemy import (
    String, Date, DateTime, Integer, Text, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_cash.models.base import Base
from clinic_cash.models.enums import PaymentMethod


class Visit(Base):
    __tablename__ = "visits"

    id: Mapped[int] = mapped_column(primary_key=True)
    visit_date: Mapped[dt.date] = mapped_column(
        Date, nullable=False, index=True
    )
    chart_number: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )
    patient_name: Mapped[str] = mapped_column(String(100), nullable=False)
    doctor: Mapped[str | None] = mapped_column(String(100), nullable=True)
    treatment_type: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow
    )

    payments: Mapped[list["VisitPayment"]] = relationship(
        back_populates="visit",
        cascade="all, delete-orphan",
        order_by="VisitPayment.id",
    )

    def __repr__(self) -> str:
        return f"<Visit {self.chart_number} {self.visit_date}>"


class VisitPayment(Base):
    __tablename__ = "visit_payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    visit_id: Mapped[int] = mapped_column(
        ForeignKey("visits.id"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            name="visit_payment_method_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    card_company: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    visit: Mapped["Visit"] = relationship(back_populates="payments")

    @property
    def is_cash(self) -> bool:
        return self.method == PaymentMethod.CASH

    def __repr__(self) -> str:
        return (
            f"<VisitPayment {self.date} {self.method.value} {self.amount}>"
        )
