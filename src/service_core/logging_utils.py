from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .errors import ServiceError


# Attributes copied from `logger.info(..., extra={...})` into the JSON payload.
EXTRA_FIELDS = (
    "event",
    "service",
    "request_id",
    "method",
    "path",
    "status_code",
    "code",
    "duration_ms",
    "cause_chain",
)


class JsonFormatter(logging.Formatter):
    """
    A structured JSON formatter for production-grade logging systems.

    Ensures logs are machine-readable and easy to index in systems such as
    CloudWatch, Datadog, and ELK.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in EXTRA_FIELDS:
            if hasattr(record, attr):
                log_payload[attr] = getattr(record, attr)

        # Include exception details when available
        if record.exc_info:
            log_payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_payload, ensure_ascii=False, default=str)


def configure_logger(name: str = "service", level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure and return a logger with JSON formatting.

    Prevents duplicate handlers and ensures clean structured logs.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def _next_link(exc: BaseException) -> Optional[BaseException]:
    # Same rule as `traceback`: `raise X from None` hides the implicit context.
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def cause_chain(exc: BaseException) -> List[str]:
    """
    Walk `__cause__` / `__context__` links below `exc`.

    Returns "Type: message" entries, nearest cause first. Cycles are cut.
    A service error holding a non-exception cause reports that value first.
    """
    chain: List[str] = []

    cause = exc.cause if isinstance(exc, ServiceError) else None
    if cause is not None and not isinstance(cause, BaseException):
        chain.append(f"{type(cause).__name__}: {cause}")

    seen = {id(exc)}
    current = _next_link(exc)

    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(f"{type(current).__name__}: {current}")
        current = _next_link(current)

    return chain


def log_service_error(
    logger: logging.Logger,
    error: ServiceError,
    *,
    request_id: Optional[str] = None,
    method: Optional[str] = None,
    path: Optional[str] = None,
) -> None:
    """
    Report a rendered service error once.

    Server-side kinds (5xx) are logged at ERROR with the cause chain;
    caller-side kinds (4xx) at WARNING.
    """
    status_code = error.status_code
    extra: Dict[str, Any] = {
        "event": "request.service_error",
        "request_id": request_id,
        "method": method,
        "path": path,
        "status_code": status_code,
        "code": error.kind.value,
    }

    chain = cause_chain(error)
    if chain:
        extra["cause_chain"] = chain

    level = logging.ERROR if status_code >= 500 else logging.WARNING
    logger.log(level, error.message, extra=extra)
