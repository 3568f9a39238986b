"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter

from customer_ledger.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    """
    Return application health status.

    The service holds no connections or state, so answering
    the request is the whole check.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "customer-ledger",
        "version": settings.APP_VERSION,
    }
