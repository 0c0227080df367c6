from __future__ import annotations

from typing import Any, Dict, Optional

from .errors import STATUS_BY_KIND, ErrorKind
from .http import ErrorBody


_EXAMPLE_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.CONFIG: "Environment variable 'GLITCH_API_LOG_LEVEL' is invalid.",
    ErrorKind.VALIDATION: "field 'name' is required",
    ErrorKind.NOT_FOUND: "user:123",
    ErrorKind.INTERNAL: "Internal Server Error",
    ErrorKind.EXTERNAL: "upload failed",
    ErrorKind.SERIALIZATION: "Expecting property name enclosed in double quotes: line 1 column 2 (char 1)",
}

_DESCRIPTIONS: Dict[int, str] = {
    400: "Bad request",
    404: "Not found",
    500: "Internal server error",
    502: "Upstream dependency failed",
}


def _error_example(
    *,
    kind: ErrorKind,
    message: str,
    request_id: Optional[str] = "7b2b5a2c4f3a4e1fb7f4f44c9c1c2c9a",
) -> Dict[str, Any]:
    """
    Build a canonical error example matching the runtime error body:
    {"code": "...", "message": "...", "request_id": "..."}
    """
    return {"code": kind.value, "message": message, "request_id": request_id}


def standard_error_responses() -> Dict[int, Dict[str, Any]]:
    """
    Reusable error response docs for FastAPI routes.

    Generated from the kind -> status table, so every status a service can
    return is documented and examples for shared statuses are grouped.
    """
    responses: Dict[int, Dict[str, Any]] = {}

    for kind, status_code in STATUS_BY_KIND.items():
        entry = responses.setdefault(
            status_code,
            {
                "model": ErrorBody,
                "description": _DESCRIPTIONS[status_code],
                "content": {"application/json": {"examples": {}}},
            },
        )
        entry["content"]["application/json"]["examples"][kind.value] = {
            "value": _error_example(kind=kind, message=_EXAMPLE_MESSAGES[kind]),
        }

    return responses
