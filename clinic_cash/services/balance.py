"""
Daily cash balance fold.

    current_balance = previous_closing + income - expenses - deposits
    daily_delta     = current_balance - previous_closing

The fold is a pure function of the day's records and the
previous closing balance. It keeps no state between calls, so
recomputing after any change to the records reproduces the
right balance. Both the API and the client-side view use it.

Records can be anything with a ``kind`` (LedgerKind) and an
integer ``amount``: ORM rows on the server, response schemas
on the client.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from clinic_cash.models.enums import LedgerKind


@dataclass(frozen=True)
class DayBalance:
    previous_closing: int
    current_balance: int
    total_income: int = 0
    total_expense: int = 0
    total_deposit: int = 0
    records: list[Any] = field(default_factory=list)

    @property
    def daily_delta(self) -> int:
        return self.current_balance - self.previous_closing


def signed_amount(record: Any) -> int:
    """The record's effect on the drawer: +amount for income, -amount otherwise."""
    kind = LedgerKind(record.kind)
    amount = int(record.amount)
    if amount < 0:
        raise ValueError(f"amount must not be negative, got {amount}")
    return kind.sign * amount


def fold_day(previous_closing: int, records: Iterable[Any]) -> DayBalance:
    """Fold one day's records onto the previous closing balance."""
    records = list(records)
    totals = {kind: 0 for kind in LedgerKind}
    balance = int(previous_closing)
    for record in records:
        balance += signed_amount(record)
        totals[LedgerKind(record.kind)] += int(record.amount)

    return DayBalance(
        previous_closing=int(previous_closing),
        current_balance=balance,
        total_income=totals[LedgerKind.INCOME],
        total_expense=totals[LedgerKind.EXPENSE],
        total_deposit=totals[LedgerKind.MANUAL_DEPOSIT],
        records=records,
    )
