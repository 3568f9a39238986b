"""
Shared enumerations.

Using str enums means values serialize to plain strings in
JSON responses and compare equal to the raw backend values.
"""

import enum


class EntryKind(str, enum.Enum):
    """What produced a ledger entry."""
    BILL = "bill"
    CASH_LOAN = "cash_loan"
    PAYMENT = "payment"
    RETURN = "return"

    @property
    def is_debit(self) -> bool:
        return self in (EntryKind.BILL, EntryKind.CASH_LOAN)


class PaymentStatus(str, enum.Enum):
    """Payment status the backend stores on a bill."""
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class ReturnType(str, enum.Enum):
    """Whether a return covers single items or the whole bill."""
    ITEM = "item"
    FULL_BILL = "full_bill"


class DueDateStatus(str, enum.Enum):
    """Urgency of an unpaid bill relative to its due date."""
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    NORMAL = "normal"
