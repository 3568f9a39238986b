"""
Domain models package.

Records are supplied by the backend and never stored here, so
this package only carries the shared enumerations.
"""

from customer_ledger.models.enums import (
    EntryKind,
    PaymentStatus,
    ReturnType,
    DueDateStatus,
)

__all__ = [
    "EntryKind",
    "PaymentStatus",
    "ReturnType",
    "DueDateStatus",
]
