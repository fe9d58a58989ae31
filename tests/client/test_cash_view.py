"""
Tests for the cash drawer view-model.

The view talks to the real app through the in-process client,
so these double as end-to-end checks of the refresh flow.
"""

import datetime as dt

import pytest

from clinic_cash.client.cash_view import CashDrawerView, parse_amount
from clinic_cash.exceptions import TransportError, ValidationError
from clinic_cash.models.enums import LedgerKind

DAY = dt.date(2026, 3, 10)
PREVIOUS_DAY = dt.date(2026, 3, 9)


class Toasts:
    """Collects notify() calls."""

    def __init__(self):
        self.messages = []

    def __call__(self, level, message):
        self.messages.append((level, message))

    @property
    def levels(self):
        return [level for level, _ in self.messages]


@pytest.fixture
def toasts():
    return Toasts()


@pytest.fixture
def view(api, toasts):
    view = CashDrawerView(api, day=DAY, notify=toasts)
    yield view
    view.dispose()


def cash_visit(api, day, amount):
    return api.register_visit({
        "visit_date": day.isoformat(),
        "chart_number": "C-7",
        "patient_name": "Han",
        "payments": [{"amount": amount, "method": "CASH"}],
    })


class TestParseAmount:

    @pytest.mark.parametrize("value, expected", [
        (5000, 5000),
        ("5000", 5000),
        ("5,000", 5000),
        (" 12,500원 ", 12500),
    ])
    def test_accepts_whole_won(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [
        "", "abc", "-100", "1.5", "²", "１２０００", 1.5, True, None, 0,
    ])
    def test_rejects_everything_else(self, value):
        with pytest.raises(ValidationError):
            parse_amount(value)

    def test_zero_allowed_when_asked(self):
        assert parse_amount("0", allow_zero=True) == 0


class TestLoading:

    def test_empty_day(self, view):
        assert view.stale is False
        assert view.balance.previous_closing == 0
        assert view.balance.current_balance == 0
        assert view.rows == []
        assert view.is_closed is False

    def test_carries_previous_day(self, api, view):
        cash_visit(api, PREVIOUS_DAY, 100_000)

        assert view.balance.previous_closing == 100_000
        assert view.balance.current_balance == 100_000

    def test_navigation_refetches(self, api, view):
        cash_visit(api, PREVIOUS_DAY, 30_000)

        view.previous_day()
        assert view.day == PREVIOUS_DAY
        assert [row.display_amount for row in view.rows] == ["+30,000원"]

        view.next_day()
        assert view.day == DAY
        assert view.rows == []


class TestRefreshSignal:

    def test_mutation_elsewhere_refreshes_view(self, api, signal, view):
        api.create_expense({
            "date": DAY.isoformat(), "amount": 20_000, "method": "CASH",
        })

        assert view.loaded_version == signal.version == 1
        row = view.rows[0]
        assert (row.sign, row.color, row.label) == ("-", "red", "지출")
        assert view.balance.current_balance == -20_000

    def test_disposed_view_stops_listening(self, api, view):
        view.dispose()
        cash_visit(api, DAY, 10_000)

        assert view.rows == []

    def test_failed_refresh_marks_stale(self, api, view, toasts, monkeypatch):
        def offline(day):
            raise TransportError("Could not reach the server")

        monkeypatch.setattr(api, "day_balance", offline)

        assert view.refresh() is None
        assert view.stale is True
        assert toasts.messages[-1] == (
            "error", "Could not load the cash drawer: Could not reach the server"
        )


class TestDeposits:

    def test_add_deposit_with_blank_description(self, view, toasts):
        record = view.add_deposit("5,000", "")

        assert record.description == "통장입금"
        assert view.balance.current_balance == -5_000
        row = view.rows[0]
        assert (row.sign, row.color, row.editable) == ("-", "green", True)
        assert toasts.levels == ["success"]

    def test_invalid_amount_is_reported(self, view, toasts):
        assert view.add_deposit("abc") is None
        assert toasts.levels == ["error"]
        assert view.rows == []

    def test_edit_deposit(self, view):
        record = view.add_deposit(5_000)

        updated = view.edit_deposit(record.id, "7,000", "Bank")

        assert updated.amount == 7_000
        assert view.balance.total_deposit == 7_000

    def test_delete_needs_confirmation(self, api, toasts):
        answers = [False, True]
        view = CashDrawerView(
            api, day=DAY, notify=toasts, confirm=lambda msg: answers.pop(0)
        )
        record = view.add_deposit(5_000)

        assert view.delete_deposit(record.id) is False
        assert len(view.rows) == 1
        assert view.delete_deposit(record.id) is True
        assert view.rows == []
        view.dispose()

    def test_delete_refused_without_confirm_callback(self, api, toasts):
        view = CashDrawerView(api, day=DAY, notify=toasts)
        record = view.add_deposit(5_000)

        assert view.delete_deposit(record.id) is False
        assert len(view.rows) == 1
        view.dispose()

    def test_non_ascii_digits_reported_not_raised(self, view, toasts):
        assert view.add_deposit("²") is None
        assert toasts.levels == ["error"]

    def test_income_row_refused_locally(self, api, signal, view, toasts):
        cash_visit(api, DAY, 50_000)
        row = view.rows[0]
        assert row.record.kind == LedgerKind.INCOME
        version = signal.version

        assert view.edit_deposit(row.record.id, 1_000) is None
        assert view.delete_deposit(row.record.id) is False

        assert signal.version == version
        assert "visit registration" in toasts.messages[-1][1]
        assert view.rows[0].record.amount == 50_000


class TestClosing:

    def test_close_with_matching_count(self, api, view, toasts):
        cash_visit(api, DAY, 50_000)

        closing = view.close_day("50,000")

        assert closing.discrepancy == 0
        assert view.is_closed is True
        assert toasts.messages[-1] == ("success", "Day closed")

    def test_close_with_discrepancy_warns(self, api, view, toasts):
        cash_visit(api, DAY, 50_000)

        view.close_day(48_000)

        level, message = toasts.messages[-1]
        assert level == "warning"
        assert "-2,000원" in message

    def test_closed_day_refuses_deposit(self, view, toasts):
        view.close_day()

        assert view.add_deposit(1_000) is None
        assert toasts.levels[-1] == "error"

    def test_reopen(self, view):
        view.close_day()

        assert view.reopen_day() is True
        assert view.is_closed is False

    def test_later_closing_locks_earlier_day(self, api, view):
        api.close_day(DAY + dt.timedelta(days=2))

        assert view.is_closed is True

    def test_earlier_closing_leaves_day_open(self, api, view):
        api.close_day(PREVIOUS_DAY)

        assert view.is_closed is False
