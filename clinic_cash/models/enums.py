"""
Shared enumerations for database models.

Python enums mapped to database enums ensure that only valid
values can be stored.
"""

import enum


class LedgerKind(str, enum.Enum):
    """
    Kind of cash drawer movement.

    INCOME adds to the drawer; EXPENSE and MANUAL_DEPOSIT (cash
    taken out of the drawer and deposited at the bank) subtract.
    """
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    MANUAL_DEPOSIT = "MANUAL_DEPOSIT"

    @property
    def sign(self) -> int:
        return 1 if self is LedgerKind.INCOME else -1


class PaymentMethod(str, enum.Enum):
    """How a visit payment or an expense was settled."""
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
