"""Business logic services."""

from customer_ledger.services.ledger_service import LedgerService
from customer_ledger.services.statistics_service import StatisticsService
from customer_ledger.services.statement_service import StatementService

__all__ = ["LedgerService", "StatisticsService", "StatementService"]
