from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Type, TypeVar


class ErrorKind(str, Enum):
    """
    Closed set of failure kinds shared by every service.

    Values double as the stable `code` field of the JSON error body and are
    part of the public API contract.
    """

    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"
    SERIALIZATION = "SERIALIZATION"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.CONFIG: 500,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
    ErrorKind.EXTERNAL: 502,
    ErrorKind.SERIALIZATION: 400,
}

_LABELS: Dict[ErrorKind, str] = {
    ErrorKind.CONFIG: "configuration error",
    ErrorKind.VALIDATION: "validation error",
    ErrorKind.NOT_FOUND: "not found",
    ErrorKind.INTERNAL: "internal error",
    ErrorKind.EXTERNAL: "external error",
    ErrorKind.SERIALIZATION: "serialization error",
}


E = TypeVar("E", bound="ServiceError")


class ServiceError(Exception):
    """
    Base error type for the backend services.

    Each service subclasses this once (e.g. `GlitchError`) so handlers can catch
    their own error type, while kind set, status mapping and constructors stay
    in one place.

    Instances are immutable after construction. Building one never raises:
    any message value is accepted and coerced to `str`.

    Attributes:
        kind: The failure kind, which alone decides the HTTP status.
        message: Human-readable text rendered into the response body.
        cause: Underlying error for External failures, logged but never rendered.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Any = "",
        *,
        cause: Any = None,
    ) -> None:
        text = message if isinstance(message, str) else _safe_str(message)
        super().__init__(text)
        object.__setattr__(self, "_kind", ErrorKind(kind))
        object.__setattr__(self, "_message", text)
        object.__setattr__(self, "_cause", cause)
        # Only exceptions can be chained; other cause values are kept for logging.
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __setattr__(self, name: str, value: Any) -> None:
        # Traceback bookkeeping is the only mutation allowed once raised.
        if name.startswith("__") and name.endswith("__"):
            object.__setattr__(self, name, value)
            return
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def cause(self) -> Any:
        return self._cause

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self._kind]

    def __str__(self) -> str:
        return f"{_LABELS[self._kind]}: {self._message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._kind.value}, {self._message!r})"

    def __reduce__(self):
        return (_rebuild, (type(self), self._kind, self._message, self._cause, self.__cause__))

    # ---------------------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------------------

    @classmethod
    def config(cls: Type[E], message: Any) -> E:
        return cls(ErrorKind.CONFIG, message)

    @classmethod
    def validation(cls: Type[E], message: Any) -> E:
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls: Type[E], message: Any) -> E:
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def internal(cls: Type[E], message: Any) -> E:
        return cls(ErrorKind.INTERNAL, message)

    @classmethod
    def external(cls: Type[E], message: Any) -> E:
        """External dependency failure with no underlying cause attached."""
        return cls(ErrorKind.EXTERNAL, message)

    @classmethod
    def external_with_cause(cls: Type[E], message: Any, cause: Any) -> E:
        """
        External dependency failure wrapping the error the dependency raised.

        The cause only feeds diagnostics (traceback chaining, `cause_chain`
        logging); the status code is 502 either way.
        """
        return cls(ErrorKind.EXTERNAL, message, cause=cause)

    @classmethod
    def from_serialization(cls: Type[E], exc: BaseException) -> E:
        """
        Convert a decode/encode failure into a Serialization error.

        The message is taken from the underlying failure; the original is kept
        as `__cause__` for tracebacks only.
        """
        err = cls(ErrorKind.SERIALIZATION, exc)
        err.__cause__ = exc
        return err


def classify(error: ServiceError) -> int:
    """Return the HTTP status code for `error`. Depends on the kind only."""
    return STATUS_BY_KIND[error.kind]


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _rebuild(cls, kind, message, cause, linked=None):
    err = cls(kind, message, cause=cause)
    if isinstance(linked, BaseException):
        err.__cause__ = linked
    return err
