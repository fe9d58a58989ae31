"""
Patient visit and payment API endpoints.

A cash payment's cash drawer record is written in the same
commit as the payment itself.
"""

import datetime as dt

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from clinic_cash.exceptions import CashLedgerError
from clinic_cash.models.base import get_db
from clinic_cash.services.visit_service import VisitService
from clinic_cash.schemas.visit import (
    VisitCreate,
    VisitResponse,
    VisitPaymentCreate,
    VisitPaymentUpdate,
    VisitPaymentResponse,
)

router = APIRouter(prefix="/visits", tags=["Visits"])


@router.post("", response_model=VisitResponse, status_code=201)
def register_visit(
    request: VisitCreate,
    db: Session = Depends(get_db),
):
    """Register a visit with its payments."""
    service = VisitService(db)
    try:
        visit = service.register_visit(request)
        db.commit()
        return visit
    except CashLedgerError:
        db.rollback()
        raise


@router.get("", response_model=list[VisitResponse])
def list_visits(
    date: dt.date = Query(...),
    db: Session = Depends(get_db),
):
    return VisitService(db).list_visits(date)


@router.get("/{visit_id}", response_model=VisitResponse)
def get_visit(
    visit_id: int,
    db: Session = Depends(get_db),
):
    return VisitService(db).get_visit(visit_id)


@router.delete("/{visit_id}", status_code=204)
def delete_visit(
    visit_id: int,
    db: Session = Depends(get_db),
):
    """Delete a visit along with its payments and their cash records."""
    service = VisitService(db)
    try:
        service.delete_visit(visit_id)
        db.commit()
    except CashLedgerError:
        db.rollback()
        raise
    return Response(status_code=204)


# --- Payments ---

@router.post(
    "/{visit_id}/payments",
    response_model=VisitPaymentResponse,
    status_code=201,
)
def add_payment(
    visit_id: int,
    request: VisitPaymentCreate,
    db: Session = Depends(get_db),
):
    service = VisitService(db)
    try:
        payment = service.add_payment(visit_id, request)
        db.commit()
        return payment
    except CashLedgerError:
        db.rollback()
        raise


@router.put("/payments/{payment_id}", response_model=VisitPaymentResponse)
def update_payment(
    payment_id: int,
    request: VisitPaymentUpdate,
    db: Session = Depends(get_db),
):
    """Edit a payment; its cash record follows."""
    service = VisitService(db)
    try:
        payment = service.update_payment(payment_id, request)
        db.commit()
        return payment
    except CashLedgerError:
        db.rollback()
        raise


@router.delete("/payments/{payment_id}", status_code=204)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
):
    service = VisitService(db)
    try:
        service.delete_payment(payment_id)
        db.commit()
    except CashLedgerError:
        db.rollback()
        raise
    return Response(status_code=204)
