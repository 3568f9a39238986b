"""
Ledger API endpoints.

These endpoints expose the ledger and statistics computations
separately for callers that only need one of them. The API layer
is thin — it handles HTTP concerns and delegates all business
logic to the services.
"""

from fastapi import APIRouter, Depends, HTTPException

from customer_ledger.api.dependencies import get_statement_service
from customer_ledger.schemas.ledger import LedgerEntry, StatementStatistics
from customer_ledger.schemas.records import CustomerSnapshot
from customer_ledger.services.statement_service import StatementService

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.post("/entries", response_model=list[LedgerEntry])
def build_ledger_entries(
    snapshot: CustomerSnapshot,
    service: StatementService = Depends(get_statement_service),
):
    """
    Build ledger entries, newest first.

    Each entry carries the running balance computed in
    chronological order.
    """
    try:
        service.ensure_single_customer(snapshot)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return service.ledger_service.build_entries(
        snapshot.sales, snapshot.payments, snapshot.returns
    )


@router.post("/statistics", response_model=StatementStatistics)
def build_statistics(
    snapshot: CustomerSnapshot,
    service: StatementService = Depends(get_statement_service),
):
    """Compute summary statistics for a snapshot."""
    try:
        service.ensure_single_customer(snapshot)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return service.statistics_service.summarize(
        snapshot.sales, snapshot.payments, snapshot.returns
    )
