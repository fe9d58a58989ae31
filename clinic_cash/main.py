"""
Clinic Cash Drawer: FastAPI application.

This is the entry point for the application.
All routers and exception handlers are registered here.
"""

import logging

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from clinic_cash.config import get_settings
from clinic_cash.exceptions import (
    CashLedgerError,
    cash_ledger_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)
from clinic_cash.observability import RequestLoggingMiddleware
from clinic_cash.api.health import router as health_router
from clinic_cash.api.ledger import router as ledger_router
from clinic_cash.api.visits import router as visits_router
from clinic_cash.api.expenses import router as expenses_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Front-desk cash drawer: visits, expenses and daily balance",
)

app.add_middleware(RequestLoggingMiddleware)

# Exception handlers
app.add_exception_handler(CashLedgerError, cash_ledger_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Register routers
app.include_router(health_router)
app.include_router(ledger_router)
app.include_router(visits_router)
app.include_router(expenses_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "clinic_cash.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
