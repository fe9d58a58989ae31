"""
Ledger service: the cash drawer's record store and balance.

This service enforces the drawer's rules:
1. Only manual deposits can be added, edited or deleted directly.
   Income and expense records belong to the visit payment or
   expense that generated them and change only with their owner.
2. Every record is tagged with exactly the source its kind implies.
3. Amounts are stored positive; direction comes from the kind.
4. Nothing cash-affecting may change on or before a closed day.

Balances are never stored per record. They are folded from the
records every time they are asked for.

The service takes a database session as a constructor argument
and only flushes. The caller controls the transaction boundary,
so a visit payment and its linked cash record are committed or
rolled back together.
"""

import datetime as dt
import logging

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from clinic_cash.config import get_settings
from clinic_cash.exceptions import (
    DayClosedError,
    InvalidOperation,
    NotFound,
)
from clinic_cash.models.cash_closing import CashClosing
from clinic_cash.models.enums import LedgerKind
from clinic_cash.models.ledger_record import LedgerRecord
from clinic_cash.schemas.ledger import ManualDepositCreate, ManualDepositUpdate
from clinic_cash.services.balance import DayBalance, fold_day

logger = logging.getLogger(__name__)


class LedgerService:
    """
    All cash drawer reads and writes pass through this service.

    The *_manual methods back the operator's adjustment surface.
    The *_linked and sync_* methods are for VisitService and
    ExpenseService only; they skip the manual-only rule because
    the call comes from the owning record.
    """

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    # --- Reads ---

    def list_records(self, day: dt.date) -> list[LedgerRecord]:
        """Return all records for a day in entry order."""
        records = self.db.execute(
            select(LedgerRecord)
            .where(LedgerRecord.date == day)
            .order_by(LedgerRecord.id)
        ).scalars().all()
        return list(records)

    def get_record(self, record_id: int) -> LedgerRecord:
        record = self.db.get(LedgerRecord, record_id)
        if not record:
            raise NotFound("Cash record", record_id)
        return record

    # --- Manual deposits ---

    def create_manual(self, request: ManualDepositCreate) -> LedgerRecord:
        """
        Add a manual deposit.

        A blank description is replaced with the configured
        default label.
        """
        if request.kind != LedgerKind.MANUAL_DEPOSIT:
            raise InvalidOperation(
                "Income and expense records are managed from visit "
                "registration and the expense list; only manual "
                "deposits can be added here",
                details={"kind": request.kind.value},
            )
        self.ensure_open(request.date)

        record = LedgerRecord(
            date=request.date,
            kind=LedgerKind.MANUAL_DEPOSIT,
            amount=request.amount,
            description=self._deposit_description(request.description),
        )
        self.db.add(record)
        self.db.flush()
        return record

    def update_manual(
        self, record_id: int, request: ManualDepositUpdate
    ) -> LedgerRecord:
        """Change a manual deposit's amount and description."""
        record = self.get_record(record_id)
        self._ensure_editable(record)
        self.ensure_open(record.date)

        record.amount = request.amount
        record.description = self._deposit_description(request.description)
        self.db.flush()
        return record

    def delete_manual(self, record_id: int) -> None:
        record = self.get_record(record_id)
        self._ensure_editable(record)
        self.ensure_open(record.date)

        self.db.delete(record)
        self.db.flush()

    def _deposit_description(self, description: str | None) -> str:
        if description is None or not description.strip():
            return self.settings.DEFAULT_DEPOSIT_DESCRIPTION
        return description.strip()

    def _ensure_editable(self, record: LedgerRecord) -> None:
        if record.source_visit_payment_id is not None:
            raise InvalidOperation(
                f"Cash record {record.id} comes from a visit payment; "
                f"change or delete it from visit registration",
                details={
                    "record_id": record.id,
                    "source": "visit_payment",
                    "source_id": record.source_visit_payment_id,
                },
            )
        if record.source_expense_id is not None:
            raise InvalidOperation(
                f"Cash record {record.id} comes from an expense; "
                f"change or delete it from the expense list",
                details={
                    "record_id": record.id,
                    "source": "expense",
                    "source_id": record.source_expense_id,
                },
            )

    # --- Linked records ---

    def create_linked(
        self,
        kind: LedgerKind,
        day: dt.date,
        amount: int,
        description: str | None,
        visit_payment_id: int | None = None,
        expense_id: int | None = None,
    ) -> LedgerRecord:
        """Create a record owned by a visit payment or an expense."""
        if (visit_payment_id is None) == (expense_id is None):
            raise InvalidOperation(
                "A linked cash record needs exactly one source"
            )
        expected = (
            LedgerKind.INCOME if visit_payment_id is not None
            else LedgerKind.EXPENSE
        )
        if kind != expected:
            raise InvalidOperation(
                f"A record linked to this source must be {expected.value}, "
                f"got {kind.value}"
            )
        self.ensure_open(day)

        record = LedgerRecord(
            date=day,
            kind=kind,
            amount=amount,
            description=description,
            source_visit_payment_id=visit_payment_id,
            source_expense_id=expense_id,
        )
        self.db.add(record)
        self.db.flush()
        logger.debug(
            "Created linked %s record %s (%s won on %s)",
            kind.value, record.id, amount, day,
        )
        return record

    def update_linked(
        self,
        record: LedgerRecord,
        day: dt.date,
        amount: int,
        description: str | None,
    ) -> LedgerRecord:
        """Bring a linked record in line with its owner, if anything changed."""
        if (
            record.date == day
            and record.amount == amount
            and record.description == description
        ):
            return record

        self.ensure_open(record.date)
        self.ensure_open(day)
        record.date = day
        record.amount = amount
        record.description = description
        self.db.flush()
        logger.debug("Updated linked record %s", record.id)
        return record

    def delete_linked(self, record: LedgerRecord) -> None:
        self.ensure_open(record.date)
        self.db.delete(record)
        self.db.flush()
        logger.debug("Deleted linked record %s", record.id)

    def find_for_visit_payment(self, payment_id: int) -> list[LedgerRecord]:
        return self._find_linked(
            LedgerRecord.source_visit_payment_id, payment_id
        )

    def find_for_expense(self, expense_id: int) -> list[LedgerRecord]:
        return self._find_linked(LedgerRecord.source_expense_id, expense_id)

    def _find_linked(self, column, source_id: int) -> list[LedgerRecord]:
        records = self.db.execute(
            select(LedgerRecord)
            .where(column == source_id)
            .order_by(LedgerRecord.id)
        ).scalars().all()
        return list(records)

    def sync_visit_payment(
        self,
        payment_id: int,
        is_cash: bool,
        day: dt.date,
        amount: int,
        description: str | None,
    ) -> LedgerRecord | None:
        """
        Make the cash drawer match a visit payment after it was saved.

        Cash payments get exactly one INCOME record; anything else
        gets none.
        """
        existing = self.find_for_visit_payment(payment_id)
        return self._sync(
            existing, is_cash, LedgerKind.INCOME, day, amount, description,
            visit_payment_id=payment_id,
        )

    def sync_expense(
        self,
        expense_id: int,
        is_cash: bool,
        day: dt.date,
        amount: int,
        description: str | None,
    ) -> LedgerRecord | None:
        """Cash expenses get exactly one EXPENSE record; anything else none."""
        existing = self.find_for_expense(expense_id)
        return self._sync(
            existing, is_cash, LedgerKind.EXPENSE, day, amount, description,
            expense_id=expense_id,
        )

    def _sync(
        self,
        existing: list[LedgerRecord],
        is_cash: bool,
        kind: LedgerKind,
        day: dt.date,
        amount: int,
        description: str | None,
        **source,
    ) -> LedgerRecord | None:
        if not is_cash:
            for record in existing:
                self.delete_linked(record)
            return None

        if not existing:
            return self.create_linked(kind, day, amount, description, **source)

        record, *duplicates = existing
        for duplicate in duplicates:
            logger.warning(
                "Removing duplicate linked record %s for %s",
                duplicate.id, source,
            )
            self.delete_linked(duplicate)
        return self.update_linked(record, day, amount, description)

    def remove_for_visit_payment(self, payment_id: int) -> int:
        """Delete every record linked to a visit payment. Returns the count."""
        records = self.find_for_visit_payment(payment_id)
        for record in records:
            self.delete_linked(record)
        return len(records)

    def remove_for_expense(self, expense_id: int) -> int:
        records = self.find_for_expense(expense_id)
        for record in records:
            self.delete_linked(record)
        return len(records)

    # --- Balances ---

    def previous_closing(self, day: dt.date) -> int:
        """
        Closing balance carried into ``day``.

        Starts from the latest closing snapshot before ``day`` (or
        0 when the drawer was never closed) and adds every movement
        after that snapshot and strictly before ``day``. The result
        equals the balance of the most recent earlier day with
        activity, or 0 if there is none.
        """
        anchor = self.db.execute(
            select(CashClosing)
            .where(CashClosing.date < day)
            .order_by(CashClosing.date.desc())
            .limit(1)
        ).scalar_one_or_none()

        signed = case(
            (LedgerRecord.kind == LedgerKind.INCOME, LedgerRecord.amount),
            else_=-LedgerRecord.amount,
        )
        query = select(func.coalesce(func.sum(signed), 0)).where(
            LedgerRecord.date < day
        )
        base = 0
        if anchor:
            base = anchor.closing_amount
            query = query.where(LedgerRecord.date > anchor.date)

        return base + int(self.db.execute(query).scalar())

    def day_balance(self, day: dt.date) -> DayBalance:
        return fold_day(self.previous_closing(day), self.list_records(day))

    # --- Closing ---

    def get_closing(self, day: dt.date) -> CashClosing:
        closing = self.db.execute(
            select(CashClosing).where(CashClosing.date == day)
        ).scalar_one_or_none()
        if not closing:
            raise NotFound("Cash closing", day.isoformat())
        return closing

    def is_closed(self, day: dt.date) -> bool:
        """True when ``day`` or any later day has been closed."""
        closing = self.db.execute(
            select(CashClosing.id).where(CashClosing.date >= day).limit(1)
        ).scalar_one_or_none()
        return closing is not None

    def ensure_open(self, day: dt.date) -> None:
        if self.is_closed(day):
            raise DayClosedError(
                f"The cash drawer is closed for {day.isoformat()}",
                details={"date": day.isoformat()},
            )

    def close_day(
        self, day: dt.date, counted_amount: int | None = None
    ) -> CashClosing:
        """
        Close the drawer for a day.

        Stores the day's folded balance as its closing amount and
        the operator's counted cash, if given, for reconciliation.
        """
        if self.is_closed(day):
            raise DayClosedError(
                f"The cash drawer for {day.isoformat()} is already closed",
                details={"date": day.isoformat()},
            )

        balance = self.day_balance(day)
        closing = CashClosing(
            date=day,
            closing_amount=balance.current_balance,
            counted_amount=counted_amount,
        )
        self.db.add(closing)
        self.db.flush()

        if closing.discrepancy:
            logger.warning(
                "Closed %s at %s won; counted %s (off by %s)",
                day, closing.closing_amount, counted_amount,
                closing.discrepancy,
            )
        else:
            logger.info("Closed %s at %s won", day, closing.closing_amount)
        return closing

    def reopen_day(self, day: dt.date) -> None:
        """Remove a day's closing. Only the latest closing can be reopened."""
        closing = self.get_closing(day)
        later = self.db.execute(
            select(CashClosing.date)
            .where(CashClosing.date > day)
            .order_by(CashClosing.date)
            .limit(1)
        ).scalar_one_or_none()
        if later is not None:
            raise InvalidOperation(
                f"Reopen {later.isoformat()} before reopening "
                f"{day.isoformat()}",
                details={"date": day.isoformat(), "later": later.isoformat()},
            )

        self.db.delete(closing)
        self.db.flush()
        logger.info("Reopened %s", day)
