"""
Pydantic schemas for patient visits and their payments.
"""

import datetime as dt

from pydantic import BaseModel, Field

from clinic_cash.models.enums import PaymentMethod
from clinic_cash.schemas.ledger import MAX_AMOUNT


class VisitPaymentCreate(BaseModel):
    """A payment; date defaults to the visit date."""
    date: dt.date | None = None
    amount: int = Field(gt=0, le=MAX_AMOUNT)
    method: PaymentMethod
    card_company: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=255)


class VisitPaymentUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""
    date: dt.date | None = None
    amount: int | None = Field(default=None, gt=0, le=MAX_AMOUNT)
    method: PaymentMethod | None = None
    card_company: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=255)


class VisitCreate(BaseModel):
    visit_date: dt.date
    chart_number: str = Field(min_length=1, max_length=20)
    patient_name: str = Field(min_length=1, max_length=100)
    doctor: str | None = Field(default=None, max_length=100)
    treatment_type: str | None = Field(default=None, max_length=100)
    notes: str | None = None
    payments: list[VisitPaymentCreate] = Field(default_factory=list)


class VisitPaymentResponse(BaseModel):
    id: int
    visit_id: int
    date: dt.date
    amount: int
    method: PaymentMethod
    card_company: str | None
    description: str | None

    model_config = {"from_attributes": True}


class VisitResponse(BaseModel):
    id: int
    visit_date: dt.date
    chart_number: str
    patient_name: str
    doctor: str | None
    treatment_type: str | None
    notes: str | None
    payments: list[VisitPaymentResponse]
    created_at: dt.datetime

    model_config = {"from_attributes": True}
