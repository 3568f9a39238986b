"""
Customer statement API endpoint.

The caller posts one consistent snapshot of a customer's records
and receives the computed statement. Nothing is stored; posting
the same snapshot again yields the same statement.
"""

from fastapi import APIRouter, Depends, HTTPException

from customer_ledger.api.dependencies import get_statement_service
from customer_ledger.schemas.ledger import CustomerStatement
from customer_ledger.schemas.records import CustomerSnapshot
from customer_ledger.services.statement_service import StatementService

router = APIRouter(prefix="/customers", tags=["Statements"])


@router.post("/{phone}/statement", response_model=CustomerStatement)
def build_customer_statement(
    phone: str,
    snapshot: CustomerSnapshot,
    service: StatementService = Depends(get_statement_service),
):
    """
    Build the full statement for the customer identified by phone.

    Returns the ledger (newest first), summary statistics,
    scheduled payments and data-quality warnings. A snapshot
    containing another customer's records is rejected, since it
    cannot produce a consistent balance.
    """
    try:
        return service.build_statement(snapshot, customer_phone=phone)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
