"""
Tests for ClinicApiClient.

Most tests run against the real app through FastAPI's TestClient;
transport failures are simulated with httpx.MockTransport.
"""

import datetime as dt

import httpx
import pytest

from clinic_cash.client.api_client import ClinicApiClient
from clinic_cash.client.refresh import RefreshSignal
from clinic_cash.exceptions import (
    DayClosedError,
    InvalidOperation,
    NotFound,
    PartialConsistencyError,
    TransportError,
    ValidationError,
)
from clinic_cash.models.enums import LedgerKind, PaymentMethod
from clinic_cash.schemas.expense import ExpenseCreate

DAY = dt.date(2026, 3, 10)


def mock_client(handler) -> ClinicApiClient:
    http = httpx.Client(
        base_url="http://clinic.test", transport=httpx.MockTransport(handler)
    )
    return ClinicApiClient(http, RefreshSignal())


class TestRoundTrips:

    def test_deposit_bumps_signal(self, api, signal):
        record = api.create_deposit(DAY, 5_000)

        assert record.kind == LedgerKind.MANUAL_DEPOSIT
        assert record.description == "통장입금"
        assert signal.version == 1

    def test_reads_do_not_bump_signal(self, api, signal):
        api.list_records(DAY)
        api.previous_closing(DAY)
        api.day_balance(DAY)

        assert signal.version == 0

    def test_visit_then_balance(self, api):
        api.register_visit({
            "visit_date": DAY.isoformat(),
            "chart_number": "C-9",
            "patient_name": "Jung",
            "payments": [{"amount": 40_000, "method": "CASH"}],
        })

        balance = api.day_balance(DAY)

        assert balance.current_balance == 40_000
        assert balance.records[0].is_editable is False

    def test_expense_schema_payload(self, api):
        expense = api.create_expense(ExpenseCreate(
            date=DAY, amount=3_000, method=PaymentMethod.CASH, vendor="Mart",
        ))

        listed = api.list_expenses(
            date_start=DAY, date_end=DAY, method=PaymentMethod.CASH
        )
        assert [e.id for e in listed.data] == [expense.id]

    def test_get_closing_returns_none_when_open(self, api):
        assert api.get_closing(DAY) is None


class TestErrorMapping:

    def test_not_found(self, api, signal):
        with pytest.raises(NotFound) as exc_info:
            api.delete_deposit(999)

        assert exc_info.value.details["id"] == 999
        assert signal.version == 0

    def test_linked_record_is_invalid_operation(self, api):
        visit = api.register_visit({
            "visit_date": DAY.isoformat(),
            "chart_number": "C-9",
            "patient_name": "Jung",
            "payments": [{"amount": 40_000, "method": "CASH"}],
        })
        record = api.list_records(DAY)[0]
        assert record.source_visit_payment_id == visit.payments[0].id

        with pytest.raises(InvalidOperation):
            api.update_deposit(record.id, 1_000)

    def test_day_closed(self, api):
        api.close_day(DAY)

        with pytest.raises(DayClosedError):
            api.create_deposit(DAY, 1_000)

    def test_validation(self, api):
        with pytest.raises(ValidationError):
            api.create_deposit(DAY, 0)

    def test_partial_consistency_code(self):
        def handler(request):
            return httpx.Response(500, json={
                "error_code": "ERR_PARTIAL_CONSISTENCY",
                "message": "Expense 3 could not be recorded",
                "details": {"expense_id": 3},
            })

        with pytest.raises(PartialConsistencyError, match="Expense 3"):
            mock_client(handler).delete_expense(3)

    def test_unexpected_500_is_transport_error(self):
        def handler(request):
            return httpx.Response(500, text="Internal Server Error")

        with pytest.raises(TransportError):
            mock_client(handler).list_records(DAY)

    def test_connection_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = mock_client(handler)
        with pytest.raises(TransportError, match="Could not reach"):
            client.create_deposit(DAY, 1_000)
        assert client.signal.version == 0
