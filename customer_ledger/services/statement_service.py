"""
Statement service — assembles a full customer statement.

Runs the ledger and statistics services over one snapshot and
adds the derived views the statement page needs: bills scheduled
for payment, the closing balance, and data-quality warnings for
records the ledger could only place approximately.
"""

import logging
import math
from datetime import datetime, timezone

from customer_ledger.config import Settings, get_settings
from customer_ledger.models.enums import DueDateStatus, EntryKind
from customer_ledger.schemas.ledger import (
    CustomerStatement,
    LedgerEntry,
    ScheduledPayment,
)
from customer_ledger.schemas.parsing import ZERO, parse_datetime
from customer_ledger.schemas.records import Bill, CustomerSnapshot, Return
from customer_ledger.services.ledger_service import (
    MANUAL_BALANCE_DESCRIPTION,
    LedgerService,
    amounts_by_sale,
    bill_reference,
)
from customer_ledger.services.statistics_service import (
    StatisticsService,
    remaining_after_returns,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
DEFAULT_CUSTOMER_NAME = "Customer"


class StatementService:
    """
    Builds statements for one customer at a time.

    The ledger and statistics are always computed from the same
    snapshot, so the closing balance and the summary agree.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        now: datetime | None = None,
    ):
        self.settings = settings or get_settings()
        self.now = parse_datetime(now) or datetime.now(timezone.utc)
        self.ledger_service = LedgerService(
            now=self.now,
            currency_label=self.settings.CURRENCY_LABEL,
        )
        self.statistics_service = StatisticsService()

    def build_statement(
        self,
        snapshot: CustomerSnapshot,
        customer_phone: str | None = None,
    ) -> CustomerStatement:
        """
        Build the statement for the customer the snapshot belongs to.

        Raises ValueError if the snapshot carries records for more
        than one customer, or for a customer other than
        customer_phone when one is given.
        """
        self.ensure_single_customer(snapshot, customer_phone)

        entries = self.ledger_service.build_entries(
            snapshot.sales, snapshot.payments, snapshot.returns
        )
        statistics = self.statistics_service.summarize(
            snapshot.sales, snapshot.payments, snapshot.returns
        )
        warnings = self.data_quality_warnings(snapshot.sales, entries)
        phones = snapshot.customer_phones()

        statement = CustomerStatement(
            customer_phone=customer_phone or (min(phones) if phones else None),
            customer_name=self._customer_name(snapshot.sales),
            entries=entries,
            statistics=statistics,
            scheduled_payments=self.scheduled_payments(
                snapshot.sales, snapshot.returns
            ),
            closing_balance=entries[0].balance if entries else ZERO,
            warnings=warnings,
        )

        logger.debug(
            "Statement for %s: %d entries, closing balance %s, %d warnings",
            statement.customer_phone, len(entries),
            statement.closing_balance, len(warnings),
        )
        return statement

    def ensure_single_customer(
        self,
        snapshot: CustomerSnapshot,
        customer_phone: str | None = None,
    ) -> None:
        """
        Reject snapshots that mix customers.

        Records without a customer phone are accepted; they are
        assumed to belong to the snapshot's customer.
        """
        phones = snapshot.customer_phones()
        if customer_phone is not None:
            others = phones - {customer_phone}
            if others:
                raise ValueError(
                    f"Snapshot contains records for other customers: "
                    f"{sorted(others)}"
                )
        elif len(phones) > 1:
            raise ValueError(
                f"Snapshot contains records for more than one customer: "
                f"{sorted(phones)}"
            )

    def scheduled_payments(
        self,
        bills: list[Bill],
        returns: list[Return],
    ) -> list[ScheduledPayment]:
        """Unpaid bills with a due date, soonest due first."""
        returns_by_sale = amounts_by_sale(returns, "total_refund")

        scheduled = []
        for bill in bills:
            if bill.due_date is None:
                continue
            remaining = remaining_after_returns(
                bill, returns_by_sale.get(bill.id, ZERO)
            )
            if remaining <= 0:
                continue
            scheduled.append(ScheduledPayment(
                sale_id=bill.id,
                description=(
                    MANUAL_BALANCE_DESCRIPTION
                    if bill.is_manual_balance
                    else bill_reference(bill.id)
                ),
                due_date=bill.due_date,
                outstanding=remaining,
                due_status=self.due_date_status(bill.due_date),
            ))

        scheduled.sort(key=lambda s: (s.due_date, s.sale_id))
        return scheduled

    def due_date_status(self, due_date: datetime) -> DueDateStatus:
        """
        Classify a due date relative to now.

        Days remaining are rounded up, so a bill due later today
        counts as due soon rather than overdue.
        """
        due = parse_datetime(due_date)
        days_left = math.ceil(
            (due - self.now).total_seconds() / SECONDS_PER_DAY
        )
        if days_left < 0:
            return DueDateStatus.OVERDUE
        if days_left <= self.settings.DUE_SOON_DAYS:
            return DueDateStatus.DUE_SOON
        return DueDateStatus.NORMAL

    def data_quality_warnings(
        self,
        bills: list[Bill],
        entries: list[LedgerEntry],
    ) -> list[str]:
        """
        Describe every approximation the ledger had to make.

        Entries are checked oldest first so the warnings read in
        the same order as the history they refer to.
        """
        bill_ids = {b.id for b in bills}
        warnings = []

        for entry in reversed(entries):
            if entry.date_estimated:
                warnings.append(
                    f"{entry.description} ({entry.reference}) has no valid "
                    f"date; it is shown at {entry.date.isoformat()} and its "
                    f"position in the ledger is approximate."
                )
            if (
                entry.kind in (EntryKind.PAYMENT, EntryKind.RETURN)
                and entry.sale_id
                and entry.sale_id not in bill_ids
            ):
                logger.warning(
                    "%s %s references unknown bill %s",
                    entry.kind.value, entry.id, entry.sale_id,
                )
                warnings.append(
                    f"{entry.description} ({entry.reference}) references "
                    f"bill {entry.sale_id}, which is not in this statement."
                )

        return warnings

    def _customer_name(self, bills: list[Bill]) -> str:
        named = [b for b in bills if b.customer_name]
        if not named:
            return DEFAULT_CUSTOMER_NAME
        earliest = min(named, key=lambda b: (b.created_at or self.now, b.id))
        return earliest.customer_name
