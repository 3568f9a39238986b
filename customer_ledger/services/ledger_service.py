"""
Ledger service — the core of the customer statement.

This service merges a customer's bills, recovery payments and
returns into one chronologically ordered ledger with a running
balance. It enforces the ledger rules:
1. Every record produces exactly one entry
2. Entries are ordered by (date, entry id), never by input order
3. Bills debit the account, payments and returns credit it
4. Balances are computed oldest first, then presented newest first

The service is a pure function of its inputs. Nothing is stored:
the ledger is rebuilt whenever the underlying records change.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from customer_ledger.config import get_settings
from customer_ledger.models.enums import EntryKind, ReturnType
from customer_ledger.schemas.ledger import LedgerEntry
from customer_ledger.schemas.parsing import ZERO, parse_datetime
from customer_ledger.schemas.records import Bill, Payment, Return

logger = logging.getLogger(__name__)

MANUAL_BALANCE_DESCRIPTION = "Manual Balance"


def amounts_by_sale(records: Iterable, field: str) -> dict[str, Decimal]:
    """Sum one amount field of payments or returns, keyed by sale id."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for record in records:
        if record.sale_id:
            totals[record.sale_id] += getattr(record, field)
    return dict(totals)


def point_of_sale_paid(bill: Bill, recovery_paid: Decimal) -> Decimal:
    """
    The part of a bill's amount_paid taken at the till.

    amount_paid is cumulative, so recovery payments recorded
    against the bill are already inside it. Whatever they do not
    explain was paid when the sale was made.
    """
    return max(ZERO, bill.amount_paid - recovery_paid)


def bill_reference(bill_id: str) -> str:
    return f"Bill #{bill_id[:8]}"


class LedgerService:
    """
    Builds ledger entries for a single customer.

    The caller supplies one consistent snapshot of bills, payments
    and returns. `now` is the timestamp substituted for records
    without a usable date; pass a fixed value to make builds over
    such records repeatable.
    """

    def __init__(
        self,
        now: datetime | None = None,
        currency_label: str | None = None,
    ):
        self.now = parse_datetime(now) or datetime.now(timezone.utc)
        self.currency_label = currency_label or get_settings().CURRENCY_LABEL

    def build_entries(
        self,
        bills: list[Bill],
        payments: list[Payment],
        returns: list[Return],
    ) -> list[LedgerEntry]:
        """Return the ledger newest first, balances already applied."""
        chronological = self.build_chronological(bills, payments, returns)
        return list(reversed(chronological))

    def build_chronological(
        self,
        bills: list[Bill],
        payments: list[Payment],
        returns: list[Return],
    ) -> list[LedgerEntry]:
        """
        Return the ledger oldest first with running balances.

        Bill rows add their full total_amount as a debit and carry
        their point-of-sale payment as a credit in the same row,
        since that payment has no entry of its own. Payment and
        return rows subtract their credit. The first entry starts
        from a balance of zero.
        """
        recovery_by_sale = amounts_by_sale(payments, "amount")
        returns_by_sale = amounts_by_sale(returns, "total_refund")

        entries = [
            self._bill_entry(
                bill,
                recovery_paid=recovery_by_sale.get(bill.id, ZERO),
                bill_returns=returns_by_sale.get(bill.id, ZERO),
            )
            for bill in bills
        ]
        entries.extend(self._payment_entry(p) for p in payments)
        entries.extend(self._return_entry(r) for r in returns)

        # Same timestamp: fall back to entry id so output never
        # depends on the order the backend returned records in
        entries.sort(key=lambda e: (e.date, e.id))

        running_balance = ZERO
        for entry in entries:
            if entry.kind.is_debit:
                running_balance += entry.debit - entry.credit
            else:
                running_balance -= entry.credit
            entry.balance = running_balance

        logger.debug(
            "Built ledger: %d bills, %d payments, %d returns, closing balance %s",
            len(bills), len(payments), len(returns), running_balance,
        )
        return entries

    # --- Entry mapping ---

    def _bill_entry(
        self,
        bill: Bill,
        recovery_paid: Decimal,
        bill_returns: Decimal,
    ) -> LedgerEntry:
        date, estimated = self._entry_date(bill, "Bill")

        if bill.is_manual_balance:
            kind = EntryKind.CASH_LOAN
            description = MANUAL_BALANCE_DESCRIPTION
        else:
            kind = EntryKind.BILL
            description = bill_reference(bill.id)
            if bill_returns > 0:
                description += (
                    f" (Return: {self.currency_label} "
                    f"{self._whole_amount(bill_returns)})"
                )

        return LedgerEntry(
            id=f"bill-{bill.id}",
            date=date,
            kind=kind,
            description=description,
            reference=bill.id[:8].upper(),
            debit=bill.total_amount,
            credit=point_of_sale_paid(bill, recovery_paid),
            paid=bill.amount_paid,
            total_amount=bill.total_amount,
            outstanding=max(ZERO, bill.total_amount - bill.amount_paid),
            bill_returns=bill_returns,
            notes=bill.notes or None,
            due_date=bill.due_date,
            status=getattr(bill.payment_status, "value", bill.payment_status),
            sale_id=bill.id,
            items=list(bill.sale_items) or None,
            date_estimated=estimated,
        )

    def _payment_entry(self, payment: Payment) -> LedgerEntry:
        date, estimated = self._entry_date(payment, "Payment")
        return LedgerEntry(
            id=f"payment-{payment.id}",
            date=date,
            kind=EntryKind.PAYMENT,
            description=f"Payment Received ({payment.payment_method.upper()})",
            reference=payment.id[:8].upper(),
            credit=payment.amount,
            notes=payment.notes or None,
            sale_id=payment.sale_id,
            date_estimated=estimated,
        )

    def _return_entry(self, ret: Return) -> LedgerEntry:
        date, estimated = self._entry_date(ret, "Return")

        if ret.return_type == ReturnType.FULL_BILL:
            description = "Full Bill Return"
        else:
            description = "Item Return"
        if ret.reason:
            description += f" - {ret.reason}"

        return LedgerEntry(
            id=f"return-{ret.id}",
            date=date,
            kind=EntryKind.RETURN,
            description=description,
            reference=f"RET-{ret.id[:6].upper()}",
            credit=ret.total_refund,
            paid=ret.total_refund,
            notes=ret.reason or None,
            sale_id=ret.sale_id or None,
            items=list(ret.return_items) or None,
            date_estimated=estimated,
        )

    def _entry_date(self, record, label: str) -> tuple[datetime, bool]:
        """Return the record's date, or the build time flagged as estimated."""
        if record.created_at is not None:
            return record.created_at, False

        logger.warning(
            "%s %s has no usable date; using %s. "
            "Its position in the ledger is approximate.",
            label, record.id, self.now.isoformat(),
        )
        return self.now, True

    @staticmethod
    def _whole_amount(value: Decimal) -> str:
        return f"{value.quantize(Decimal('1'), rounding=ROUND_HALF_UP):,}"
