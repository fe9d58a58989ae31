"""
Error taxonomy and FastAPI exception handlers.

Every failure the cash drawer can report maps to one exception
class with a stable error code. The same classes are raised on
the server by the services and re-raised on the client by
ClinicApiClient after it decodes an error response, so both
sides speak one vocabulary.

Error bodies always have the shape:

    {"error_code": "...", "message": "...", "details": {...}}
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class CashLedgerError(Exception):
    """Base class for every error raised by the cash drawer."""

    error_code = "ERR_INTERNAL"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(CashLedgerError):
    """Amount missing, non-numeric or not positive; required field absent."""

    error_code = "ERR_VALIDATION"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidOperation(CashLedgerError):
    """
    The request is well-formed but not allowed.

    Raised when the manual adjustment surface targets an income
    or expense record, which belong to their visit payment or
    expense and change only through those.
    """

    error_code = "ERR_INVALID_OPERATION"
    status_code = status.HTTP_400_BAD_REQUEST


class DayClosedError(InvalidOperation):
    """The cash drawer for that day (or a later one) has been closed."""

    error_code = "ERR_DAY_CLOSED"


class NotFound(CashLedgerError):
    """The targeted record does not exist (possibly deleted elsewhere)."""

    error_code = "ERR_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} {resource_id} not found"
        super().__init__(
            message, details={"resource": resource, "id": resource_id}
        )


class PartialConsistencyError(CashLedgerError):
    """
    The primary visit/expense write went through but the linked
    cash record write failed. The request's unit of work is rolled
    back, so nothing from it is persisted.
    """

    error_code = "ERR_PARTIAL_CONSISTENCY"


class TransportError(CashLedgerError):
    """Network or server failure seen by the HTTP client."""

    error_code = "ERR_TRANSPORT"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# Used by the client to turn an error body back into an exception.
ERROR_CODES: dict[str, type[CashLedgerError]] = {
    cls.error_code: cls
    for cls in (
        ValidationError,
        InvalidOperation,
        DayClosedError,
        PartialConsistencyError,
        TransportError,
    )
}


def error_body(error_code: str, message: str, details: dict | None = None) -> dict:
    return {
        "error_code": error_code,
        "message": message,
        "details": details or {},
    }


# --- Global exception handlers ---

async def cash_ledger_exception_handler(
    request: Request, exc: CashLedgerError
) -> JSONResponse:
    """Render application errors in the standard envelope."""
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error_code, exc.message, exc.details),
    )


async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        500: "ERR_INTERNAL",
    }
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            error_code_map.get(exc.status_code, "ERR_UNKNOWN"),
            str(exc.detail),
        ),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Pydantic request validation errors become ERR_VALIDATION."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    message = "; ".join(
        f"{'.'.join(str(p) for p in e['loc'][1:]) or 'body'}: {e['msg']}"
        for e in errors
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            ValidationError.error_code,
            message or "Validation error",
            {"errors": errors},
        ),
    )


async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.exception(
        "Unhandled exception on %s %s", request.method, request.url.path
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "ERR_INTERNAL", "An internal server error occurred"
        ),
    )
