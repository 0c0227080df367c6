"""
Service Core

Shared error contract for the backend services: the closed error taxonomy,
its HTTP status mapping, and the boundary that renders errors as JSON.
"""

from .errors import STATUS_BY_KIND, ErrorKind, ServiceError, classify
from .serialization import decode_json, encode_json, parse_model, serialization_errors

__all__ = [
    "STATUS_BY_KIND",
    "ErrorKind",
    "ServiceError",
    "classify",
    "decode_json",
    "encode_json",
    "parse_model",
    "serialization_errors",
]
