"""
HTTP client used by the front-desk screens.

Every call is one synchronous round trip. Error responses are
turned back into the exceptions the server raised (see
clinic_cash.exceptions); network failures and unexpected server
errors become TransportError. Nothing is retried automatically.

Successful mutations bump the shared RefreshSignal so that any
open cash drawer view re-fetches.
"""

import datetime as dt
import logging
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from clinic_cash.config import get_settings
from clinic_cash.exceptions import (
    ERROR_CODES,
    InvalidOperation,
    NotFound,
    TransportError,
    ValidationError,
)
from clinic_cash.client.refresh import RefreshSignal
from clinic_cash.models.enums import LedgerKind
from clinic_cash.schemas.expense import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseListResponse,
)
from clinic_cash.schemas.ledger import (
    CashClosingResponse,
    DayBalanceResponse,
    LedgerRecordResponse,
)
from clinic_cash.schemas.visit import (
    VisitCreate,
    VisitResponse,
    VisitPaymentCreate,
    VisitPaymentUpdate,
    VisitPaymentResponse,
)

logger = logging.getLogger(__name__)


def _payload(data: BaseModel | dict, partial: bool = False) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_unset=partial)
    return data


class ClinicApiClient:
    """
    Thin wrapper over httpx.Client.

    Pass an existing client (e.g. FastAPI's TestClient) or let
    one be built from API_BASE_URL and CLIENT_TIMEOUT.
    """

    def __init__(
        self,
        http: httpx.Client | None = None,
        signal: RefreshSignal | None = None,
    ):
        if http is None:
            settings = get_settings()
            http = httpx.Client(
                base_url=settings.API_BASE_URL,
                timeout=settings.CLIENT_TIMEOUT,
            )
        self.http = http
        self.signal = signal if signal is not None else RefreshSignal()

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # --- Transport ---

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
        mutation: str | None = None,
    ) -> httpx.Response:
        try:
            response = self.http.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError(
                f"Could not reach the server: {e}",
                details={"method": method, "path": path},
            ) from e

        self._raise_for_error(response)
        if mutation:
            self.signal.bump(mutation)
        return response

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        code = body.get("error_code")
        message = body.get("message") or f"HTTP {response.status_code}"
        details = body.get("details") or {}

        if code == NotFound.error_code or response.status_code == 404:
            raise NotFound(details.get("resource", "Resource"), details.get("id"))
        if code in ERROR_CODES:
            raise ERROR_CODES[code](message, details)
        if response.status_code == 422:
            raise ValidationError(message, details)
        if response.status_code >= 500:
            raise TransportError(
                message, details={"status_code": response.status_code}
            )
        raise InvalidOperation(message, details)

    # --- Cash drawer ---

    def list_records(self, day: dt.date) -> list[LedgerRecordResponse]:
        response = self._request(
            "GET", "/ledger", params={"date": day.isoformat()}
        )
        return [LedgerRecordResponse.model_validate(r) for r in response.json()]

    def previous_closing(self, day: dt.date) -> int:
        response = self._request(
            "GET", "/ledger/previous", params={"date": day.isoformat()}
        )
        return int(response.json()["closing_amount"])

    def day_balance(self, day: dt.date) -> DayBalanceResponse:
        response = self._request(
            "GET", "/ledger/balance", params={"date": day.isoformat()}
        )
        return DayBalanceResponse.model_validate(response.json())

    def create_deposit(
        self, day: dt.date, amount: int, description: str | None = None
    ) -> LedgerRecordResponse:
        response = self._request(
            "POST",
            "/ledger",
            json={
                "date": day.isoformat(),
                "kind": LedgerKind.MANUAL_DEPOSIT.value,
                "amount": amount,
                "description": description,
            },
            mutation="deposit created",
        )
        return LedgerRecordResponse.model_validate(response.json())

    def update_deposit(
        self, record_id: int, amount: int, description: str | None = None
    ) -> LedgerRecordResponse:
        response = self._request(
            "PUT",
            f"/ledger/{record_id}",
            json={"amount": amount, "description": description},
            mutation="deposit updated",
        )
        return LedgerRecordResponse.model_validate(response.json())

    def delete_deposit(self, record_id: int) -> None:
        self._request(
            "DELETE", f"/ledger/{record_id}", mutation="deposit deleted"
        )

    def close_day(
        self, day: dt.date, counted_amount: int | None = None
    ) -> CashClosingResponse:
        response = self._request(
            "POST",
            "/ledger/close",
            json={"date": day.isoformat(), "counted_amount": counted_amount},
            mutation="day closed",
        )
        return CashClosingResponse.model_validate(response.json())

    def get_closing(self, day: dt.date) -> CashClosingResponse | None:
        try:
            response = self._request(
                "GET", "/ledger/close", params={"date": day.isoformat()}
            )
        except NotFound:
            return None
        return CashClosingResponse.model_validate(response.json())

    def reopen_day(self, day: dt.date) -> None:
        self._request(
            "DELETE",
            "/ledger/close",
            params={"date": day.isoformat()},
            mutation="day reopened",
        )

    # --- Visits ---

    def register_visit(self, visit: VisitCreate | dict) -> VisitResponse:
        response = self._request(
            "POST", "/visits", json=_payload(visit), mutation="visit registered"
        )
        return VisitResponse.model_validate(response.json())

    def delete_visit(self, visit_id: int) -> None:
        self._request(
            "DELETE", f"/visits/{visit_id}", mutation="visit deleted"
        )

    def add_visit_payment(
        self, visit_id: int, payment: VisitPaymentCreate | dict
    ) -> VisitPaymentResponse:
        response = self._request(
            "POST",
            f"/visits/{visit_id}/payments",
            json=_payload(payment),
            mutation="visit payment added",
        )
        return VisitPaymentResponse.model_validate(response.json())

    def update_visit_payment(
        self, payment_id: int, changes: VisitPaymentUpdate | dict
    ) -> VisitPaymentResponse:
        response = self._request(
            "PUT",
            f"/visits/payments/{payment_id}",
            json=_payload(changes, partial=True),
            mutation="visit payment updated",
        )
        return VisitPaymentResponse.model_validate(response.json())

    def delete_visit_payment(self, payment_id: int) -> None:
        self._request(
            "DELETE",
            f"/visits/payments/{payment_id}",
            mutation="visit payment deleted",
        )

    # --- Expenses ---

    def create_expense(self, expense: ExpenseCreate | dict) -> ExpenseResponse:
        response = self._request(
            "POST",
            "/expenses",
            json=_payload(expense),
            mutation="expense created",
        )
        return ExpenseResponse.model_validate(response.json())

    def update_expense(
        self, expense_id: int, changes: ExpenseUpdate | dict
    ) -> ExpenseResponse:
        response = self._request(
            "PUT",
            f"/expenses/{expense_id}",
            json=_payload(changes, partial=True),
            mutation="expense updated",
        )
        return ExpenseResponse.model_validate(response.json())

    def delete_expense(self, expense_id: int) -> None:
        self._request(
            "DELETE", f"/expenses/{expense_id}", mutation="expense deleted"
        )

    def list_expenses(self, **filters) -> ExpenseListResponse:
        params = {}
        for key, value in filters.items():
            if value is None:
                continue
            if isinstance(value, dt.date):
                value = value.isoformat()
            elif isinstance(value, Enum):
                value = value.value
            params[key] = value
        response = self._request("GET", "/expenses", params=params)
        return ExpenseListResponse.model_validate(response.json())
