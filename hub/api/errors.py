"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module convertit les erreurs métier (`WorkflowError`), les HTTPException et
les erreurs imprévues en une enveloppe unique `{code, message, trace_id, details}`.
Le message des erreurs métier est destiné à être affiché tel quel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from hub.core.http_constants import (
    HTTP_CONFLICT,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNPROCESSABLE_ENTITY,
)
from hub.domain.errors import (
    AlreadyMember,
    InvalidTransition,
    NoApproversFound,
    NotAuthorized,
    NotConfigured,
    NotFound,
    PersistenceFailure,
    ValidationFailed,
    WorkflowError,
)

log = structlog.get_logger(__name__)

STATUS_BY_ERROR: dict[type[WorkflowError], int] = {
    NotConfigured: HTTP_CONFLICT,
    NoApproversFound: HTTP_CONFLICT,
    InvalidTransition: HTTP_CONFLICT,
    AlreadyMember: HTTP_CONFLICT,
    NotAuthorized: HTTP_FORBIDDEN,
    NotFound: HTTP_NOT_FOUND,
    ValidationFailed: HTTP_UNPROCESSABLE_ENTITY,
    PersistenceFailure: HTTP_SERVICE_UNAVAILABLE,
}

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None

    def to_response(self, status_code: int) -> JSONResponse:
        content: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "trace_id": self.trace_id,
        }
        if self.details:
            content["details"] = self.details
        return JSONResponse(status_code=status_code, content=content)


def extract_trace_id(request: Request) -> str | None:
    """Trace ID from headers, else the request id bound by the middleware."""
    return request.headers.get("X-Trace-ID") or getattr(request.state, "request_id", None)


def status_for(exc: WorkflowError) -> int:
    for klass in type(exc).__mro__:
        if klass in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[klass]
    return HTTP_CONFLICT


def handle_workflow_error(request: Request, exc: WorkflowError) -> JSONResponse:
    status_code = status_for(exc)
    log.info("workflow_error", code=exc.code, status_code=status_code, error_message=exc.message)
    return ErrorEnvelope(exc.code, exc.message, extract_trace_id(request), exc.details).to_response(
        status_code
    )


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    response = ErrorEnvelope(code, str(exc.detail), extract_trace_id(request)).to_response(
        exc.status_code
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return ErrorEnvelope(
        "VALIDATION_ERROR",
        "Invalid request",
        extract_trace_id(request),
        {"errors": jsonable_encoder(exc.errors())},
    ).to_response(HTTP_UNPROCESSABLE_ENTITY)


def handle_persistence_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error("persistence_error", error=type(exc).__name__, exc_info=True)
    failure = PersistenceFailure()
    return ErrorEnvelope(failure.code, failure.message, extract_trace_id(request)).to_response(
        HTTP_SERVICE_UNAVAILABLE
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    log.error("unexpected_error", exception_type=type(exc).__name__, exc_info=True)
    return ErrorEnvelope(
        "INTERNAL_ERROR", "An unexpected error occurred", extract_trace_id(request)
    ).to_response(HTTP_INTERNAL_SERVER_ERROR)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkflowError, handle_workflow_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_persistence_error)
    app.add_exception_handler(Exception, handle_generic_exception)
