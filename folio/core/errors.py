"""
Exception Handlers

Maps exceptions that escape route handlers onto ``ErrorResponse`` bodies.
``HTTPException`` keeps FastAPI's own handling; everything registered here
covers errors raised below the routers (validation inside services, database
failures, bugs).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError

from folio.models.contracts.common import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(
    status_code: int, error: str, message: str, details: dict[str, Any] | None = None
) -> JSONResponse:
    """Build a JSON error response with the standard body."""
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _conflict_message(detail: str) -> str:
    lowered = detail.lower()
    if "unique" in lowered or "duplicate" in lowered:
        return "Resource already exists"
    if "foreign key" in lowered:
        return "Referenced resource not found"
    return "Database constraint violation"


async def handle_validation_error(request: Request, exc: PydanticValidationError) -> JSONResponse:
    fields = {".".join(str(part) for part in e["loc"]): e["msg"] for e in exc.errors()}
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Validation failed",
        {"fields": fields},
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    detail = str(exc.orig) if exc.orig else str(exc)
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {detail}")
    return error_response(status.HTTP_409_CONFLICT, "conflict", _conflict_message(detail))


async def handle_no_result(request: Request, exc: NoResultFound) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "not_found", "Resource not found")


async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error", str(exc))


async def handle_operational_error(request: Request, exc: OperationalError) -> JSONResponse:
    # Storage is unreachable or locked; content cannot be served right now
    logger.error(f"Database unavailable on {request.url.path}: {exc}", exc_info=True)
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "service_unavailable",
        "Service temporarily unavailable",
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the Folio exception handlers on an application."""
    app.add_exception_handler(PydanticValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(NoResultFound, handle_no_result)
    app.add_exception_handler(ValueError, handle_value_error)
    app.add_exception_handler(OperationalError, handle_operational_error)
    app.add_exception_handler(Exception, handle_unexpected)
