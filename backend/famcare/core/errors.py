"""Uniform JSON error envelope and the FastAPI handlers that emit it."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from famcare.core.logger import current_request_id
from famcare.services.errors import RateLimitedError, ServiceError

log = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
    500: "internal_error",
    503: "service_unavailable",
}


def http_status_to_code(status_code: int) -> str:
    return _STATUS_CODES.get(status_code, "error")


def error_envelope(
    *,
    status: int,
    code: str,
    description: str,
    errors: dict[str, list[str]] | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "status": status,
        "code": code,
        "description": description,
        "errors": errors,
        "details": details,
        "request_id": current_request_id(),
    }


def _error_response(
    body: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(status_code=body["status"], content=body, headers=headers)


def _field_name(loc: tuple[Any, ...] | list[Any]) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def validation_errors_to_map(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    field_errors: dict[str, list[str]] = {}
    for error in errors:
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        field_errors.setdefault(_field_name(error.get("loc", ())), []).append(message)
    return field_errors


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("service error on %s: %s", request.url.path, exc.message)
    else:
        log.info("request rejected: %s", exc.code, extra={"path": request.url.path})
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    body = error_envelope(
        status=exc.status_code,
        code=exc.code,
        description=exc.message,
        errors=exc.errors,
        details=exc.details,
    )
    return _error_response(body, headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = error_envelope(
        status=int(HTTPStatus.UNPROCESSABLE_ENTITY),
        code="validation_error",
        description="Request validation failed",
        errors=validation_errors_to_map(list(exc.errors())),
    )
    return _error_response(body)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    description = exc.detail if isinstance(exc.detail, str) else HTTPStatus(exc.status_code).phrase
    body = error_envelope(
        status=exc.status_code,
        code=http_status_to_code(exc.status_code),
        description=description,
    )
    return _error_response(body, getattr(exc, "headers", None))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    body = error_envelope(
        status=int(HTTPStatus.INTERNAL_SERVER_ERROR),
        code="internal_error",
        description="Internal server error",
    )
    return _error_response(body)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
