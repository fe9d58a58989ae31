"""Front-desk side: HTTP client, refresh signal and cash drawer view."""

from clinic_cash.client.refresh import RefreshSignal
from clinic_cash.client.api_client import ClinicApiClient
from clinic_cash.client.cash_view import CashDrawerView, LedgerRow, parse_amount

__all__ = [
    "RefreshSignal",
    "ClinicApiClient",
    "CashDrawerView",
    "LedgerRow",
    "parse_amount",
]
