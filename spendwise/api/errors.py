"""
Error mapping for the HTTP layer.

DESIGN DECISION: Domain modules raise their own exceptions and know
nothing about HTTP. This module is the ONLY place where an exception
becomes a status code. Every error body has the same shape:

    {"error": <code>, "message": <text>, "errors": [<field issues>]}

Unexpected exceptions are logged in full and answered with a generic
500; their details never reach the client.
"""

from typing import Any, Iterable

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from spendwise.ledger import InsufficientBudgetError, InvalidBudgetError
from spendwise.models.schemas import ErrorResponse, FieldIssue
from spendwise.queries import NoMatchingRecordsError, QueryExecutionError
from spendwise.services.auth import (
    EmailTakenError,
    InvalidCredentialsError,
    UnauthenticatedError,
    WeakPasswordError,
)
from spendwise.services.storage import NotFoundError, StorageError
from spendwise.spending import RecordNotFoundError


logger = structlog.get_logger(__name__)

# Location prefixes FastAPI adds to validation errors
_LOCATION_PARTS = {"body", "query", "path", "header"}

DOMAIN_ERRORS: dict[type[Exception], tuple[int, str]] = {
    UnauthenticatedError: (status.HTTP_401_UNAUTHORIZED, "Unauthenticated"),
    InvalidCredentialsError: (status.HTTP_401_UNAUTHORIZED, "InvalidCredentials"),
    EmailTakenError: (status.HTTP_400_BAD_REQUEST, "EmailTaken"),
    InsufficientBudgetError: (status.HTTP_400_BAD_REQUEST, "InsufficientBudget"),
    InvalidBudgetError: (status.HTTP_400_BAD_REQUEST, "InvalidBudget"),
    RecordNotFoundError: (status.HTTP_404_NOT_FOUND, "RecordNotFound"),
    NotFoundError: (status.HTTP_404_NOT_FOUND, "NotFound"),
    NoMatchingRecordsError: (status.HTTP_404_NOT_FOUND, "NoMatchingRecords"),
    QueryExecutionError: (status.HTTP_400_BAD_REQUEST, "ValidationError"),
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    errors: Iterable[FieldIssue] = (),
) -> JSONResponse:
    body = ErrorResponse(error=code, message=message, errors=list(errors))
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def _field_issues(errors: Iterable[dict[str, Any]]) -> list[FieldIssue]:
    issues = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PARTS]
        issues.append(FieldIssue(field=".".join(loc) or "request", message=error.get("msg", "")))
    return issues


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query strings are all 400s."""
    issues = _field_issues(exc.errors())
    logger.info(
        "request_rejected",
        path=request.url.path,
        fields=[issue.field for issue in issues],
    )
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "ValidationError",
        "Request validation failed.",
        issues,
    )


async def weak_password_handler(request: Request, exc: WeakPasswordError) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "ValidationError",
        str(exc),
        [FieldIssue(field="password", message=str(exc))],
    )


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Look up the status and code for a domain exception."""
    for exc_type in type(exc).__mro__:
        if exc_type in DOMAIN_ERRORS:
            status_code, code = DOMAIN_ERRORS[exc_type]
            logger.info(
                "domain_error",
                path=request.url.path,
                error=code,
                status_code=status_code,
            )
            return error_response(status_code, code, str(exc))

    return await server_error_handler(request, exc)


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected: log everything, tell the client nothing."""
    correlation_id = getattr(request.state, "correlation_id", None)
    logger.error(
        "unhandled_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        correlation_id=str(correlation_id) if correlation_id else None,
        exc_info=exc,
    )

    components = getattr(request.app.state, "components", None)
    if components is not None:
        await components.audit_logger.log_error(
            error_type=type(exc).__name__,
            error_message=str(exc),
            details={"path": request.url.path, "method": request.method},
            correlation_id=correlation_id,
        )

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "ServerError",
        "Internal server error.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every handler to the application."""
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(WeakPasswordError, weak_password_handler)

    for exc_type in DOMAIN_ERRORS:
        app.add_exception_handler(exc_type, domain_error_handler)

    app.add_exception_handler(StorageError, server_error_handler)
    app.add_exception_handler(Exception, server_error_handler)
