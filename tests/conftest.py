"""
Shared test fixtures.

Statements depend on "now" for due-date status and for records
without a usable date. Every test gets the same fixed clock so
results are repeatable.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from customer_ledger.main import app
from customer_ledger.api.dependencies import get_statement_service
from customer_ledger.services.statement_service import StatementService


FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """The fixed clock used by services under test."""
    return FIXED_NOW


@pytest.fixture
def client(now):
    """
    Provide a test client whose services use the fixed clock.

    We override the get_statement_service dependency so the
    FastAPI app builds statements with our clock instead of
    the wall clock.
    """
    app.dependency_overrides[get_statement_service] = (
        lambda: StatementService(now=now)
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
