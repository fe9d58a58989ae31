"""
Visit service: patient visit registration and payments.

Every cash payment has one INCOME record in the cash drawer.
Each operation here writes the visit/payment first and then
brings the linked cash record in line, inside the same session,
so the API commits both or neither.
"""

import datetime as dt
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_cash.exceptions import NotFound, PartialConsistencyError
from clinic_cash.models.visit import Visit, VisitPayment
from clinic_cash.schemas.visit import (
    VisitCreate,
    VisitPaymentCreate,
    VisitPaymentUpdate,
)
from clinic_cash.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class VisitService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger_service = LedgerService(db)

    def register_visit(self, request: VisitCreate) -> Visit:
        """Register a visit together with its payments."""
        visit = Visit(
            visit_date=request.visit_date,
            chart_number=request.chart_number,
            patient_name=request.patient_name,
            doctor=request.doctor,
            treatment_type=request.treatment_type,
            notes=request.notes,
        )
        self.db.add(visit)
        self.db.flush()

        for payment_request in request.payments:
            self._add_payment(visit, payment_request)
        return visit

    def get_visit(self, visit_id: int) -> Visit:
        visit = self.db.get(Visit, visit_id)
        if not visit:
            raise NotFound("Visit", visit_id)
        return visit

    def list_visits(self, day: dt.date) -> list[Visit]:
        visits = self.db.execute(
            select(Visit)
            .where(Visit.visit_date == day)
            .order_by(Visit.id)
        ).scalars().all()
        return list(visits)

    def delete_visit(self, visit_id: int) -> None:
        """Delete a visit, its payments and their cash records."""
        visit = self.get_visit(visit_id)
        for payment in visit.payments:
            self._remove_cash_record(payment)
        self.db.delete(visit)
        self.db.flush()

    # --- Payments ---

    def get_payment(self, payment_id: int) -> VisitPayment:
        payment = self.db.get(VisitPayment, payment_id)
        if not payment:
            raise NotFound("Visit payment", payment_id)
        return payment

    def add_payment(
        self, visit_id: int, request: VisitPaymentCreate
    ) -> VisitPayment:
        visit = self.get_visit(visit_id)
        return self._add_payment(visit, request)

    def update_payment(
        self, payment_id: int, request: VisitPaymentUpdate
    ) -> VisitPayment:
        """
        Edit a payment and keep its cash record in lockstep.

        Switching a payment to or from cash creates or deletes
        the cash record.
        """
        payment = self.get_payment(payment_id)
        for key, value in request.model_dump(exclude_unset=True).items():
            if key in ("date", "amount", "method") and value is None:
                continue
            setattr(payment, key, value)
        self.db.flush()

        self._sync_cash_record(payment)
        return payment

    def delete_payment(self, payment_id: int) -> None:
        payment = self.get_payment(payment_id)
        self._remove_cash_record(payment)
        self.db.delete(payment)
        self.db.flush()

    def _add_payment(
        self, visit: Visit, request: VisitPaymentCreate
    ) -> VisitPayment:
        payment = VisitPayment(
            visit=visit,
            date=request.date or visit.visit_date,
            amount=request.amount,
            method=request.method,
            card_company=request.card_company,
            description=request.description,
        )
        self.db.add(payment)
        self.db.flush()

        self._sync_cash_record(payment)
        return payment

    # --- Cash drawer bookkeeping ---

    @staticmethod
    def cash_description(payment: VisitPayment) -> str:
        if payment.description:
            return payment.description
        visit = payment.visit
        return f"{visit.patient_name} ({visit.chart_number})"

    def _sync_cash_record(self, payment: VisitPayment) -> None:
        try:
            self.ledger_service.sync_visit_payment(
                payment.id,
                payment.is_cash,
                payment.date,
                payment.amount,
                self.cash_description(payment),
            )
        except SQLAlchemyError as e:
            logger.error(
                "Visit payment %s saved but its cash record failed: %s",
                payment.id, e,
            )
            raise PartialConsistencyError(
                f"Visit payment {payment.id} could not be recorded "
                f"in the cash drawer",
                details={"visit_payment_id": payment.id},
            ) from e

    def _remove_cash_record(self, payment: VisitPayment) -> None:
        try:
            self.ledger_service.remove_for_visit_payment(payment.id)
        except SQLAlchemyError as e:
            logger.error(
                "Cash record for visit payment %s could not be removed: %s",
                payment.id, e,
            )
            raise PartialConsistencyError(
                f"Cash record for visit payment {payment.id} could not "
                f"be removed",
                details={"visit_payment_id": payment.id},
            ) from e
