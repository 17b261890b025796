"""
Finance Ledger: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from finance_ledger.config import get_settings
from finance_ledger.logging_config import configure_logging
from finance_ledger.api.health import router as health_router
from finance_ledger.api.accounts import router as accounts_router
from finance_ledger.api.ledger import router as ledger_router

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry ledger engine",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(ledger_router)
