"""
Statistics service — summary figures for a customer statement.

Every figure is derived from the same records the ledger is built
from, using the same reconciliation rule: a bill's amount_paid is
the cumulative paid figure, and recovery payments are the part of
it collected after the sale. Accumulation is done in Decimal at
full precision; rounding happens only when the result is
serialized.
"""

from decimal import Decimal

from customer_ledger.schemas.ledger import StatementStatistics
from customer_ledger.schemas.parsing import ZERO
from customer_ledger.schemas.records import Bill, Payment, Return
from customer_ledger.services.ledger_service import (
    amounts_by_sale,
    point_of_sale_paid,
)

HUNDRED = Decimal("100")


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part as a percentage of whole, or zero when whole is zero."""
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def remaining_after_returns(bill: Bill, bill_returns: Decimal) -> Decimal:
    """What is still owed on a bill once its own returns are credited."""
    return bill.total_amount - bill.amount_paid - bill_returns


class StatisticsService:
    """Summary figures for one customer's bills, payments and returns."""

    def summarize(
        self,
        bills: list[Bill],
        payments: list[Payment],
        returns: list[Return],
    ) -> StatementStatistics:
        """
        Compute the statement summary.

        total_outstanding is floored at zero; when payments and
        returns exceed purchases the surplus is reported as
        credit_balance instead. closing_balance is the figure the
        ledger's newest entry must show.
        """
        recovery_by_sale = amounts_by_sale(payments, "amount")
        returns_by_sale = amounts_by_sale(returns, "total_refund")

        total_purchases = sum((b.total_amount for b in bills), ZERO)
        total_paid = sum((b.amount_paid for b in bills), ZERO)
        total_point_of_sale_paid = sum(
            (
                point_of_sale_paid(b, recovery_by_sale.get(b.id, ZERO))
                for b in bills
            ),
            ZERO,
        )
        total_payments_received = sum((p.amount for p in payments), ZERO)
        total_return_credits = sum((r.total_refund for r in returns), ZERO)

        net_balance = total_purchases - total_paid - total_return_credits
        has_credit = net_balance < 0

        closing_balance = (
            total_purchases
            - total_point_of_sale_paid
            - total_payments_received
            - total_return_credits
        )

        paid_bills = sum(
            1 for b in bills
            if remaining_after_returns(b, returns_by_sale.get(b.id, ZERO)) <= 0
        )

        return StatementStatistics(
            total_purchases=total_purchases,
            total_paid=total_paid,
            total_point_of_sale_paid=total_point_of_sale_paid,
            total_payments_received=total_payments_received,
            total_return_credits=total_return_credits,
            total_outstanding=max(ZERO, net_balance),
            net_balance=net_balance,
            credit_balance=-net_balance if has_credit else ZERO,
            has_credit=has_credit,
            closing_balance=closing_balance,
            collection_rate=percentage(
                total_point_of_sale_paid + total_payments_received,
                total_purchases,
            ),
            refund_rate=percentage(total_return_credits, total_purchases),
            total_bills=len(bills),
            paid_bills=paid_bills,
            unpaid_bills=len(bills) - paid_bills,
            total_returns=len(returns),
        )
