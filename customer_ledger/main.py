"""
Customer Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from customer_ledger.config import get_settings
from customer_ledger.logging_config import setup_logging
from customer_ledger.api.health import router as health_router
from customer_ledger.api.ledger import router as ledger_router
from customer_ledger.api.statements import router as statements_router

settings = get_settings()
setup_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Customer ledgers and statement summaries for a retail shop",
)

# Register routers
app.include_router(health_router)
app.include_router(ledger_router)
app.include_router(statements_router)


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "customer_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
