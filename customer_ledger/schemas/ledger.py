"""
Pydantic schemas for computed statement data.

These are derived on every request and never stored. Amounts are
held at full precision while the ledger is built; serialization
rounds them to two decimal places for display.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_serializer

from customer_ledger.models.enums import DueDateStatus, EntryKind
from customer_ledger.schemas.parsing import ZERO, round_money
from customer_ledger.schemas.records import LineItem


class LedgerEntry(BaseModel):
    """
    One row in a customer's balanced transaction history.

    balance is the customer's running balance after this entry,
    computed in chronological order. date_estimated is set when
    the source record had no usable date and the build time was
    substituted.
    """
    id: str
    date: datetime
    kind: EntryKind
    description: str
    reference: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    paid: Decimal = ZERO
    total_amount: Decimal = ZERO
    outstanding: Decimal = ZERO
    balance: Decimal = ZERO
    bill_returns: Decimal | None = None
    notes: str | None = None
    due_date: datetime | None = None
    status: str | None = None
    sale_id: str | None = None
    items: list[LineItem] | None = None
    date_estimated: bool = False

    @field_serializer(
        "debit", "credit", "paid", "total_amount", "outstanding", "balance",
    )
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)

    @field_serializer("bill_returns")
    def serialize_optional_money(self, v: Decimal | None) -> Decimal | None:
        return None if v is None else round_money(v)


class StatementStatistics(BaseModel):
    """Summary figures for one customer, consistent with the ledger."""
    total_purchases: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_point_of_sale_paid: Decimal = ZERO
    total_payments_received: Decimal = ZERO
    total_return_credits: Decimal = ZERO
    total_outstanding: Decimal = ZERO
    net_balance: Decimal = ZERO
    credit_balance: Decimal = ZERO
    has_credit: bool = False
    closing_balance: Decimal = ZERO
    collection_rate: Decimal = ZERO
    refund_rate: Decimal = ZERO
    total_bills: int = 0
    paid_bills: int = 0
    unpaid_bills: int = 0
    total_returns: int = 0

    @field_serializer(
        "total_purchases",
        "total_paid",
        "total_point_of_sale_paid",
        "total_payments_received",
        "total_return_credits",
        "total_outstanding",
        "net_balance",
        "credit_balance",
        "closing_balance",
        "collection_rate",
        "refund_rate",
    )
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)


class ScheduledPayment(BaseModel):
    """An unpaid bill with a due date."""
    sale_id: str
    description: str
    due_date: datetime
    outstanding: Decimal
    due_status: DueDateStatus

    @field_serializer("outstanding")
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)


class CustomerStatement(BaseModel):
    """Everything the statement page shows for one customer."""
    customer_phone: str | None = None
    customer_name: str
    entries: list[LedgerEntry] = Field(default_factory=list)
    statistics: StatementStatistics
    scheduled_payments: list[ScheduledPayment] = Field(default_factory=list)
    closing_balance: Decimal = ZERO
    warnings: list[str] = Field(default_factory=list)

    @field_serializer("closing_balance")
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)
