"""
Tests for the pure daily balance fold.

No database here: fold_day only needs objects with a kind and
an amount.
"""

from types import SimpleNamespace

import pytest

from clinic_cash.models.enums import LedgerKind
from clinic_cash.services.balance import fold_day, signed_amount


def record(kind, amount):
    return SimpleNamespace(kind=kind, amount=amount)


class TestFoldDay:

    def test_empty_day_carries_previous_closing(self):
        balance = fold_day(120_000, [])

        assert balance.current_balance == 120_000
        assert balance.daily_delta == 0
        assert balance.records == []

    def test_mixed_day(self):
        """100,000 carried in, +50,000 income, -20,000 expense, -10,000 deposit."""
        balance = fold_day(100_000, [
            record(LedgerKind.INCOME, 50_000),
            record(LedgerKind.EXPENSE, 20_000),
            record(LedgerKind.MANUAL_DEPOSIT, 10_000),
        ])

        assert balance.previous_closing == 100_000
        assert balance.current_balance == 120_000
        assert balance.daily_delta == 20_000
        assert balance.total_income == 50_000
        assert balance.total_expense == 20_000
        assert balance.total_deposit == 10_000

    def test_balance_may_go_negative(self):
        balance = fold_day(0, [record(LedgerKind.MANUAL_DEPOSIT, 5_000)])

        assert balance.current_balance == -5_000
        assert balance.daily_delta == -5_000

    def test_order_does_not_matter(self):
        records = [
            record(LedgerKind.INCOME, 30_000),
            record(LedgerKind.EXPENSE, 7_000),
            record(LedgerKind.INCOME, 12_000),
        ]
        forward = fold_day(1_000, records)
        backward = fold_day(1_000, list(reversed(records)))

        assert forward.current_balance == backward.current_balance == 36_000

    def test_accepts_string_kinds(self):
        """Response payloads may carry the kind as its raw value."""
        balance = fold_day(0, [record("INCOME", 3_000), record("EXPENSE", 1_000)])
        assert balance.current_balance == 2_000

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            fold_day(0, [record(LedgerKind.INCOME, -1)])

    def test_zero_amount_is_neutral(self):
        balance = fold_day(500, [record(LedgerKind.EXPENSE, 0)])
        assert balance.current_balance == 500


class TestSignedAmount:

    def test_income_is_positive(self):
        assert signed_amount(record(LedgerKind.INCOME, 4_000)) == 4_000

    def test_expense_and_deposit_are_negative(self):
        assert signed_amount(record(LedgerKind.EXPENSE, 4_000)) == -4_000
        assert signed_amount(record(LedgerKind.MANUAL_DEPOSIT, 4_000)) == -4_000

    def test_fold_matches_signed_sum(self):
        records = [
            record(LedgerKind.INCOME, 9_000),
            record(LedgerKind.MANUAL_DEPOSIT, 2_000),
            record(LedgerKind.EXPENSE, 500),
        ]
        balance = fold_day(100, records)

        assert balance.daily_delta == sum(signed_amount(r) for r in records)
