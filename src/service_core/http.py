"""
HTTP boundary for service errors.

Every failed request is rendered here exactly once: status from the error
kind, JSON body with the message. Causes go to the logs, never to the client.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Optional, Sequence, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ErrorKind, ServiceError, classify
from .logging_utils import log_service_error


REQUEST_ID_HEADER = "X-Request-ID"
UNKNOWN_REQUEST_ID = "unknown"

# Framework HTTP errors outside the 404 case keep their own status under this code.
HTTP_ERROR_CODE = "HTTP_ERROR"
INTERNAL_ERROR_MESSAGE = "Internal Server Error"

# Error type FastAPI reports when a request body is not parseable JSON.
JSON_INVALID = "json_invalid"

# Do not emit request completion logs for health endpoints
HEALTHCHECK_PATHS = {"/health"}


class ErrorBody(BaseModel):
    code: str = Field(
        ...,
        description="Stable error code for clients",
        json_schema_extra={"example": ErrorKind.NOT_FOUND.value},
    )
    message: str = Field(
        ...,
        json_schema_extra={"example": "user:123"},
    )
    request_id: Optional[str] = Field(
        None,
        json_schema_extra={"example": "7b2b5a2c4f3a4e1fb7f4f44c9c1c2c9a"},
    )


def get_request_id(request: Request) -> str:
    """
    Return the request correlation id if present.

    The request context middleware sets `request.state.request_id`.
    If missing, a stable sentinel is returned rather than a fresh id.
    """
    rid = getattr(request.state, "request_id", None)
    if isinstance(rid, str) and rid.strip():
        return rid
    return UNKNOWN_REQUEST_ID


def _json_error(*, status_code: int, code: str, message: str, request_id: str) -> JSONResponse:
    payload = ErrorBody(code=code, message=message, request_id=request_id).model_dump()
    return JSONResponse(
        status_code=status_code,
        content=payload,
        headers={REQUEST_ID_HEADER: request_id},
    )


def render_error(error: ServiceError, request_id: str = UNKNOWN_REQUEST_ID) -> JSONResponse:
    """Build the HTTP response for a service error. The cause is not included."""
    return _json_error(
        status_code=classify(error),
        code=error.kind.value,
        message=error.message,
        request_id=request_id,
    )


def register_error_handlers(
    app: FastAPI,
    error_type: Type[ServiceError],
    logger: logging.Logger,
) -> None:
    """
    Install the service's exception handlers on `app`.

    Args:
        app: The FastAPI application.
        error_type: The service's error class; subclasses are handled too.
        logger: Structured logger receiving one record per rendered error.
    """

    @app.exception_handler(error_type)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        request_id = get_request_id(request)
        log_service_error(
            logger,
            exc,
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        return render_error(exc, request_id)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if any(err.get("type") == JSON_INVALID for err in errors):
            error = error_type(ErrorKind.SERIALIZATION, _summarize_json_invalid(errors))
        else:
            error = error_type.validation(_summarize_validation(errors))
        return await service_error_handler(request, error)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        request_id = get_request_id(request)
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        code = ErrorKind.NOT_FOUND.value if exc.status_code == 404 else HTTP_ERROR_CODE

        logger.info(
            "HTTP exception raised",
            extra={
                "event": "request.http_exception",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": exc.status_code,
                "code": code,
            },
        )

        response = _json_error(
            status_code=exc.status_code,
            code=code,
            message=message,
            request_id=request_id,
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = get_request_id(request)

        logger.exception(
            "Unhandled exception",
            extra={
                "event": "error.unhandled_exception",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": 500,
                "code": ErrorKind.INTERNAL.value,
            },
        )

        return render_error(error_type.internal(INTERNAL_ERROR_MESSAGE), request_id)


def install_request_context(app: FastAPI, logger: logging.Logger) -> None:
    """
    Attach a request id to every request and emit structured lifecycle logs.
    """

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        start = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
            return response

        finally:
            duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
            path = request.url.path

            if path not in HEALTHCHECK_PATHS:
                logger.info(
                    "Request completed",
                    extra={
                        "event": "request.completed",
                        "request_id": request_id,
                        "method": request.method,
                        "path": path,
                        "status_code": getattr(response, "status_code", None),
                        "duration_ms": duration_ms,
                    },
                )

            if response is not None:
                response.headers[REQUEST_ID_HEADER] = request_id


def _summarize_validation(errors: Sequence[Dict[str, Any]]) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else str(err.get("msg", "invalid")))
    return "; ".join(parts) or "Request validation failed"


def _summarize_json_invalid(errors: Sequence[Dict[str, Any]]) -> str:
    for err in errors:
        if err.get("type") == JSON_INVALID:
            ctx = err.get("ctx") or {}
            return str(ctx.get("error") or err.get("msg") or "JSON decode error")
    return "JSON decode error"
