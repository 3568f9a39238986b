"""
Tests for the StatementService.

Covers statement assembly, scheduled payments, due-date status,
data-quality warnings and single-customer enforcement.
"""

import logging
from datetime import timedelta
from decimal import Decimal

import pytest

from customer_ledger.config import Settings
from customer_ledger.models.enums import DueDateStatus
from customer_ledger.schemas.records import CustomerSnapshot
from customer_ledger.services.statement_service import StatementService


PHONE = "03001234567"


def snapshot(sales=(), payments=(), returns=()):
    return CustomerSnapshot.model_validate({
        "sales": list(sales),
        "payments": list(payments),
        "returns": list(returns),
    })


def sale(id, total, paid=0, at="2024-05-01T10:00:00Z", **extra):
    return {
        "id": id,
        "customerPhone": PHONE,
        "customerName": "Ali Paints",
        "totalAmount": str(total),
        "amountPaid": str(paid),
        "createdAt": at,
        **extra,
    }


def payment(id, sale_id, amount, at="2024-05-10T10:00:00Z", **extra):
    return {
        "id": id,
        "saleId": sale_id,
        "customerPhone": PHONE,
        "amount": str(amount),
        "paymentMethod": "cash",
        "createdAt": at,
        **extra,
    }


def ret(id, sale_id, refund, at="2024-05-12T10:00:00Z", **extra):
    return {
        "id": id,
        "saleId": sale_id,
        "customerPhone": PHONE,
        "totalRefund": str(refund),
        "returnType": "item",
        "createdAt": at,
        **extra,
    }


class TestBuildStatement:

    def test_statement_combines_ledger_and_statistics(self, now):
        service = StatementService(now=now)
        data = snapshot(
            sales=[
                sale("s-1", 1000, paid=400),
                sale("s-2", 500, paid=500, at="2024-05-02T10:00:00Z"),
            ],
            payments=[payment("p-1", "s-1", 400)],
            returns=[ret("r-1", "s-1", 100)],
        )

        statement = service.build_statement(data, customer_phone=PHONE)

        assert statement.customer_phone == PHONE
        assert statement.customer_name == "Ali Paints"
        assert len(statement.entries) == 4
        assert statement.closing_balance == Decimal("500")
        assert statement.closing_balance == statement.statistics.closing_balance
        assert statement.statistics.total_outstanding == Decimal("500")
        assert statement.warnings == []

    def test_entries_are_newest_first(self, now):
        service = StatementService(now=now)
        data = snapshot(
            sales=[sale("s-1", 1000)],
            payments=[payment("p-1", "s-1", 400)],
        )

        statement = service.build_statement(data)

        assert statement.entries[0].id == "payment-p-1"
        assert statement.entries[-1].id == "bill-s-1"

    def test_empty_snapshot(self, now):
        statement = StatementService(now=now).build_statement(snapshot())

        assert statement.entries == []
        assert statement.closing_balance == Decimal("0")
        assert statement.customer_name == "Customer"
        assert statement.customer_phone is None
        assert statement.statistics.collection_rate == Decimal("0")

    def test_name_comes_from_earliest_bill(self, now):
        data = snapshot(sales=[
            sale("s-2", 100, at="2024-05-02T10:00:00Z", customerName="Ali Paints Ltd"),
            sale("s-1", 100, at="2024-05-01T10:00:00Z"),
            sale("s-0", 100, at="2024-04-01T10:00:00Z", customerName=None),
        ])

        statement = StatementService(now=now).build_statement(data)

        assert statement.customer_name == "Ali Paints"

    def test_phone_taken_from_records_when_not_given(self, now):
        statement = StatementService(now=now).build_statement(
            snapshot(sales=[sale("s-1", 100)])
        )
        assert statement.customer_phone == PHONE


class TestSingleCustomer:

    def test_records_for_other_customer_rejected(self, now):
        service = StatementService(now=now)
        data = snapshot(
            sales=[sale("s-1", 1000)],
            payments=[payment("p-1", "s-1", 100, customerPhone="03119999999")],
        )

        with pytest.raises(ValueError, match="other customers"):
            service.build_statement(data, customer_phone=PHONE)

    def test_mixed_snapshot_without_phone_rejected(self, now):
        service = StatementService(now=now)
        data = snapshot(sales=[
            sale("s-1", 1000),
            sale("s-2", 1000, customerPhone="03119999999"),
        ])

        with pytest.raises(ValueError, match="more than one customer"):
            service.ensure_single_customer(data)

    def test_records_without_phone_are_accepted(self, now):
        service = StatementService(now=now)
        data = snapshot(
            sales=[sale("s-1", 1000)],
            returns=[ret("r-1", "s-1", 100, customerPhone=None)],
        )

        service.ensure_single_customer(data, PHONE)


class TestScheduledPayments:

    def test_only_unpaid_bills_with_due_dates(self, now):
        service = StatementService(now=now)
        data = snapshot(
            sales=[
                sale("s-due", 1000, paid=200, dueDate="2024-06-20T00:00:00Z"),
                sale("s-nodue", 1000),
                sale("s-paid", 1000, paid=1000, dueDate="2024-06-10T00:00:00Z"),
                sale("s-returned", 1000, paid=700, dueDate="2024-06-10T00:00:00Z"),
            ],
            returns=[ret("r-1", "s-returned", 300)],
        )

        scheduled = service.scheduled_payments(data.sales, data.returns)

        assert [s.sale_id for s in scheduled] == ["s-due"]
        assert scheduled[0].outstanding == Decimal("800")
        assert scheduled[0].description == "Bill #s-due"

    def test_sorted_by_due_date(self, now):
        service = StatementService(now=now)
        data = snapshot(sales=[
            sale("s-later", 100, dueDate="2024-07-01T00:00:00Z"),
            sale("s-sooner", 100, dueDate="2024-06-03T00:00:00Z"),
            sale("loan-1", 100, dueDate="2024-05-01T00:00:00Z", isManualBalance=True),
        ])

        scheduled = service.scheduled_payments(data.sales, data.returns)

        assert [s.sale_id for s in scheduled] == ["loan-1", "s-sooner", "s-later"]
        assert scheduled[0].description == "Manual Balance"
        assert [s.due_status for s in scheduled] == [
            DueDateStatus.OVERDUE, DueDateStatus.DUE_SOON, DueDateStatus.NORMAL,
        ]


class TestDueDateStatus:

    def test_past_due_date_is_overdue(self, now):
        service = StatementService(now=now)
        assert service.due_date_status(now - timedelta(days=2)) == DueDateStatus.OVERDUE

    def test_later_today_is_due_soon(self, now):
        service = StatementService(now=now)
        assert service.due_date_status(now + timedelta(hours=3)) == DueDateStatus.DUE_SOON

    def test_within_window_is_due_soon(self, now):
        service = StatementService(now=now)
        assert service.due_date_status(now + timedelta(days=7)) == DueDateStatus.DUE_SOON

    def test_beyond_window_is_normal(self, now):
        service = StatementService(now=now)
        assert service.due_date_status(now + timedelta(days=8)) == DueDateStatus.NORMAL

    def test_window_comes_from_settings(self, now):
        settings = Settings()
        settings.DUE_SOON_DAYS = 14
        service = StatementService(settings=settings, now=now)

        assert service.due_date_status(now + timedelta(days=10)) == DueDateStatus.DUE_SOON


class TestWarnings:

    def test_estimated_date_is_reported(self, now):
        service = StatementService(now=now)
        data = snapshot(
            sales=[sale("s-1", 1000)],
            payments=[payment("p-1", "s-1", 100, at="not a date")],
        )

        statement = service.build_statement(data)

        assert len(statement.warnings) == 1
        assert "P-1" in statement.warnings[0]
        assert "approximate" in statement.warnings[0]
        assert statement.entries[0].date == now
        assert statement.entries[0].date_estimated is True

    def test_orphan_payment_is_reported_and_logged(self, now, caplog):
        service = StatementService(now=now)
        data = snapshot(
            sales=[sale("s-1", 1000)],
            payments=[payment("p-1", "ghost-bill", 100)],
        )

        with caplog.at_level(logging.WARNING, logger="customer_ledger"):
            statement = service.build_statement(data)

        assert len(statement.warnings) == 1
        assert "ghost-bill" in statement.warnings[0]
        assert "ghost-bill" in caplog.text
        # Still credited to the account
        assert statement.closing_balance == Decimal("900")

    def test_return_without_sale_is_not_an_orphan(self, now):
        service = StatementService(now=now)
        data = snapshot(
            sales=[sale("s-1", 1000)],
            returns=[ret("r-1", None, 100)],
        )

        assert service.build_statement(data).warnings == []
