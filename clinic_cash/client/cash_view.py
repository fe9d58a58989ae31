"""
Cash drawer view (시재 관리).

View-model behind the cash drawer dialog. It shows one day at a
time: the balance carried in from the previous day, every cash
movement of the day and the resulting balance, folded locally
with clinic_cash.services.balance.fold_day.

The view re-fetches when its date changes and whenever the
shared RefreshSignal moves, so a visit or expense saved on
another screen shows up without reopening the dialog.

Only manual deposits can be added, edited or deleted here.
Income and expense rows are refused before any request is sent,
with a pointer to the screen that owns them.

Failures never escape as exceptions: they are reported through
the ``notify(level, message)`` callback (a toast in the UI) and
the operation returns None/False.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable

from clinic_cash.client.api_client import ClinicApiClient
from clinic_cash.exceptions import (
    CashLedgerError,
    InvalidOperation,
    ValidationError,
)
from clinic_cash.models.enums import LedgerKind
from clinic_cash.schemas.ledger import CashClosingResponse, LedgerRecordResponse
from clinic_cash.services.balance import DayBalance, fold_day

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]
Confirm = Callable[[str], bool]

# sign, colour, label
KIND_STYLES: dict[LedgerKind, tuple[str, str, str]] = {
    LedgerKind.INCOME: ("+", "blue", "수입"),
    LedgerKind.EXPENSE: ("-", "red", "지출"),
    LedgerKind.MANUAL_DEPOSIT: ("-", "green", "통장입금"),
}

OWNER_SCREENS = {
    LedgerKind.INCOME: "visit registration",
    LedgerKind.EXPENSE: "the expense list",
}


def parse_amount(value, allow_zero: bool = False) -> int:
    """
    Turn operator input into whole won.

    Accepts ints and numeric strings, with thousands separators
    and a trailing 원. Raises ValidationError for anything else.
    """
    if isinstance(value, bool):
        raise ValidationError("Amount must be a number")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str):
        cleaned = value.replace(",", "").replace("원", "").strip()
        if not (cleaned.isascii() and cleaned.isdigit()):
            raise ValidationError(
                "Amount must be a whole number", details={"value": value}
            )
        amount = int(cleaned)
    else:
        raise ValidationError(
            "Amount must be a whole number", details={"value": repr(value)}
        )

    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(
            "Amount must be greater than zero", details={"value": amount}
        )
    return amount


def _log_notifier(level: str, message: str) -> None:
    if level == "error":
        logger.error(message)
    else:
        logger.info(message)


@dataclass(frozen=True)
class LedgerRow:
    record: LedgerRecordResponse

    @property
    def sign(self) -> str:
        return KIND_STYLES[self.record.kind][0]

    @property
    def color(self) -> str:
        return KIND_STYLES[self.record.kind][1]

    @property
    def label(self) -> str:
        return KIND_STYLES[self.record.kind][2]

    @property
    def editable(self) -> bool:
        return self.record.is_editable

    @property
    def display_amount(self) -> str:
        return f"{self.sign}{self.record.amount:,}원"


class CashDrawerView:

    def __init__(
        self,
        api: ClinicApiClient,
        day: dt.date | None = None,
        notify: Notifier | None = None,
        confirm: Confirm | None = None,
    ):
        self.api = api
        self.day = day or dt.date.today()
        self.notify = notify or _log_notifier
        self.confirm = confirm or (lambda message: False)

        self.balance: DayBalance | None = None
        self.closed = False
        self.stale = True
        self.loaded_version = -1

        self._unsubscribe = api.signal.subscribe(self._on_refresh_signal)
        self.refresh()

    def dispose(self) -> None:
        """Stop listening to the refresh signal (dialog closed)."""
        self._unsubscribe()

    # --- Loading ---

    def _on_refresh_signal(self, version: int) -> None:
        self.refresh()

    def refresh(self) -> DayBalance | None:
        """
        Re-fetch the day's records and previous closing, then fold.

        The lock state comes from the server: a closing on this day
        or any later day closes it.
        """
        version = self.api.signal.version
        try:
            snapshot = self.api.day_balance(self.day)
        except CashLedgerError as e:
            self.stale = True
            self._fail(e, "Could not load the cash drawer")
            return None

        self.balance = fold_day(snapshot.previous_closing, snapshot.records)
        self.closed = snapshot.is_closed
        self.stale = False
        self.loaded_version = version
        return self.balance

    @property
    def rows(self) -> list[LedgerRow]:
        if self.balance is None:
            return []
        return [LedgerRow(record) for record in self.balance.records]

    @property
    def is_closed(self) -> bool:
        return self.closed

    # --- Date navigation ---

    def select_date(self, day: dt.date) -> DayBalance | None:
        self.day = day
        return self.refresh()

    def next_day(self) -> DayBalance | None:
        return self.select_date(self.day + dt.timedelta(days=1))

    def previous_day(self) -> DayBalance | None:
        return self.select_date(self.day - dt.timedelta(days=1))

    # --- Manual deposits ---

    def add_deposit(
        self, amount, description: str | None = None
    ) -> LedgerRecordResponse | None:
        try:
            value = parse_amount(amount)
            record = self.api.create_deposit(self.day, value, description)
        except CashLedgerError as e:
            self._fail(e)
            return None
        self.notify("success", "Deposit added")
        return record

    def edit_deposit(
        self, record_id: int, amount, description: str | None = None
    ) -> LedgerRecordResponse | None:
        try:
            self._ensure_editable(record_id)
            value = parse_amount(amount)
            record = self.api.update_deposit(record_id, value, description)
        except CashLedgerError as e:
            self._fail(e)
            return None
        self.notify("success", "Deposit updated")
        return record

    def delete_deposit(self, record_id: int) -> bool:
        """
        Delete a manual deposit after the operator confirms.

        With no confirm callback the delete is refused.
        """
        try:
            self._ensure_editable(record_id)
        except CashLedgerError as e:
            self._fail(e)
            return False

        if not self.confirm("Delete this deposit?"):
            return False

        try:
            self.api.delete_deposit(record_id)
        except CashLedgerError as e:
            self._fail(e)
            return False
        self.notify("success", "Deposit deleted")
        return True

    def _ensure_editable(self, record_id: int) -> None:
        """
        Refuse income/expense rows locally. Rows the view has not
        loaded are left for the server to judge.
        """
        for row in self.rows:
            if row.record.id != record_id:
                continue
            if not row.editable:
                screen = OWNER_SCREENS[row.record.kind]
                raise InvalidOperation(
                    f"This {row.label} entry is managed from {screen}; "
                    f"edit or delete it there",
                    details={"record_id": record_id},
                )
            return

    # --- Closing ---

    def close_day(self, counted_amount=None) -> CashClosingResponse | None:
        try:
            counted = (
                None if counted_amount in (None, "")
                else parse_amount(counted_amount, allow_zero=True)
            )
            closing = self.api.close_day(self.day, counted)
        except CashLedgerError as e:
            self._fail(e)
            return None

        if closing.discrepancy:
            self.notify(
                "warning",
                f"Day closed; counted cash differs by {closing.discrepancy:,}원",
            )
        else:
            self.notify("success", "Day closed")
        return closing

    def reopen_day(self) -> bool:
        try:
            self.api.reopen_day(self.day)
        except CashLedgerError as e:
            self._fail(e)
            return False
        self.notify("success", "Day reopened")
        return True

    def _fail(self, error: CashLedgerError, prefix: str | None = None) -> None:
        message = f"{prefix}: {error.message}" if prefix else error.message
        logger.debug("Cash drawer view error %s: %s", error.error_code, message)
        self.notify("error", message)
