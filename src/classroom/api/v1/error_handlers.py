"""
FastAPI exception handlers that map application exceptions to HTTP responses.

Every error leaves the API with the same body:

    {
      "timestamp": "2026-10-19T12:00:00Z",
      "status": 409,
      "error": "duplicate_name",
      "message": "A class section named 'CS101-A' already exists",
      "path": "/api/v1/sections"
    }

Field-level failures (request validation, entity rules) add a `field_errors` list of
`{field, message, rejected_value}` entries, one per rejected field.

Status codes come from the exceptions themselves (`exc.http_status()`), so the handlers
stay tiny.
"""

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from classroom.exceptions.base import (
    ClassroomError,
    DuplicateError,
    InvalidArgumentError,
    NotFoundError,
    RepositoryError,
)
from classroom.schemas.errors import ErrorResponse, FieldErrorDetail, ValidationErrorResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    field_errors: list[FieldErrorDetail] | None = None,
) -> JSONResponse:
    if field_errors is not None:
        body: ErrorResponse = ValidationErrorResponse(
            status=status_code, error=error, message=message, path=request.url.path, field_errors=field_errors
        )
    else:
        body = ErrorResponse(status=status_code, error=error, message=message, path=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _from_exception(request: Request, exc: ClassroomError) -> JSONResponse:
    payload = exc.to_payload()
    return _error_response(request, exc.http_status(), payload["error"], payload["message"])


# Most specific first (NotFoundError, DuplicateError, InvalidArgumentError)

async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.info("NotFoundError for %s %s: %s", request.method, request.url.path, exc.message)
    return _from_exception(request, exc)


async def duplicate_error_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    # the constraint name is for logs only, it never reaches the client
    logger.info(
        "DuplicateError for %s %s: fields=%s constraint=%s",
        request.method, request.url.path, exc.fields, exc.constraint,
    )
    return _from_exception(request, exc)


async def invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    logger.info("InvalidArgumentError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    field_errors = [FieldErrorDetail(**v.to_dict()) for v in exc.violations]
    return _error_response(request, exc.http_status(), exc.error_code, exc.message, field_errors)


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    # Driver details stay in the logs
    logger.error("RepositoryError for %s %s: %s", request.method, request.url.path, str(exc))
    return _error_response(request, exc.http_status(), exc.error_code or "repository_error", INTERNAL_ERROR_MESSAGE)


def _field_name(loc: tuple[Any, ...]) -> str:
    # ("body", "term") -> "term", ("query", "term") -> "term", ("body",) -> "body"
    parts = [str(p) for p in loc[1:]] or [str(p) for p in loc]
    return ".".join(parts)


def _rejected_value(error: dict[str, Any]) -> str | None:
    if error.get("type") == "missing":
        return None
    value = error.get("input")
    return None if value is None else str(value)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    400 for malformed input caught before it reaches the service: bad JSON, missing
    or out-of-range fields, wrong parameter types.
    """
    errors = exc.errors()
    field_errors = [
        FieldErrorDetail(field=_field_name(tuple(e.get("loc", ()))), message=e.get("msg", ""), rejected_value=_rejected_value(e))
        for e in errors
    ]

    if any(e.get("type") == "json_invalid" for e in errors):
        code, message = "malformed_json", "Request body is not valid JSON"
    else:
        code, message = "validation_failed", "Validation failed for one or more fields"

    logger.info(
        "RequestValidationError for %s %s: fields=%s",
        request.method, request.url.path, [f.field for f in field_errors],
    )
    return _error_response(request, status.HTTP_400_BAD_REQUEST, code, message, field_errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same body shape."""
    try:
        error = HTTPStatus(exc.status_code).phrase.lower().replace(" ", "_")
    except ValueError:
        error = "http_error"
    response = _error_response(request, exc.status_code, error, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error for %s %s", request.method, request.url.path)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", INTERNAL_ERROR_MESSAGE)


# Helper to register all handlers on an app (called from the app factory)
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(DuplicateError, duplicate_error_handler)
    app.add_exception_handler(InvalidArgumentError, invalid_argument_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
