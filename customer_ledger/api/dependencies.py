"""
FastAPI dependencies.

Routers ask for services through these functions so tests can
swap in a service with a fixed clock via dependency_overrides.
"""

from customer_ledger.config import get_settings
from customer_ledger.services.statement_service import StatementService


def get_statement_service() -> StatementService:
    """Provide a statement service for a single request."""
    return StatementService(settings=get_settings())
