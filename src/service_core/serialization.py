from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import ServiceError


M = TypeVar("M", bound=BaseModel)

# Failures raised by json / pydantic when a payload cannot be parsed.
DECODE_FAILURES: Tuple[Type[BaseException], ...] = (json.JSONDecodeError, UnicodeDecodeError, ValidationError)

# json.dumps reports unencodable values (TypeError) and NaN/Infinity or
# circular references (ValueError) with plain builtins.
ENCODE_FAILURES: Tuple[Type[BaseException], ...] = (TypeError, ValueError)


@contextmanager
def serialization_errors(
    error_type: Type[ServiceError] = ServiceError,
    failures: Tuple[Type[BaseException], ...] = DECODE_FAILURES,
) -> Iterator[None]:
    """
    Re-raise payload decode failures inside the block as Serialization errors.

    Only `failures` are converted; service errors and any other exception
    (e.g. a ValueError from handler code) pass through untouched.

    Example:
        with serialization_errors(GlitchError):
            payload = json.loads(event_body)
    """
    try:
        yield
    except ServiceError:
        raise
    except failures as exc:
        raise error_type.from_serialization(exc) from exc


def decode_json(text: Union[str, bytes, bytearray], error_type: Type[ServiceError] = ServiceError) -> Any:
    with serialization_errors(error_type):
        return json.loads(text)


def encode_json(value: Any, error_type: Type[ServiceError] = ServiceError) -> str:
    # allow_nan=False: NaN/Infinity are not valid JSON and would break clients.
    with serialization_errors(error_type, ENCODE_FAILURES):
        return json.dumps(value, ensure_ascii=False, allow_nan=False)


def parse_model(
    model: Type[M],
    payload: Union[str, bytes, bytearray],
    error_type: Type[ServiceError] = ServiceError,
) -> M:
    """Validate a raw JSON payload against a pydantic model."""
    with serialization_errors(error_type):
        return model.model_validate_json(payload)
