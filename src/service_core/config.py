from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Type

from dotenv import load_dotenv

from .errors import ServiceError


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServiceConfig:
    """
    Process-wide settings for one service, loaded once at cold start.

    Attributes:
        service_name: Identifier used in logs and health responses.
        environment: Deployment stage (development, staging, production).
        log_level: Name of a stdlib logging level.
    """
    service_name: str
    environment: str = "development"
    log_level: str = "INFO"

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def env_prefix(service_name: str) -> str:
    """`glitch-api` -> `GLITCH_API`."""
    return service_name.upper().replace("-", "_")


def require_env(name: str, error_type: Type[ServiceError] = ServiceError) -> str:
    """
    Return a required environment variable.

    Raises:
        error_type (Config kind): If the variable is missing or blank.
    """
    load_dotenv()
    value = os.getenv(name)

    if value is None or not value.strip():
        raise error_type.config(f"Environment variable {name!r} is not set or empty.")

    return value


def load_service_config(
    service_name: str,
    error_type: Type[ServiceError] = ServiceError,
) -> ServiceConfig:
    """
    Load service configuration from environment variables.

    Reads `<PREFIX>_ENV` and `<PREFIX>_LOG_LEVEL` (falling back to `LOG_LEVEL`),
    where PREFIX is derived from the service name.

    Raises:
        error_type (Config kind): If the log level is not a known level name.
    """
    load_dotenv()
    prefix = env_prefix(service_name)

    environment = os.getenv(f"{prefix}_ENV") or "development"
    log_level = (os.getenv(f"{prefix}_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").strip().upper()

    if log_level not in LOG_LEVELS:
        raise error_type.config(
            f"Unsupported log level {log_level!r}; expected one of {', '.join(LOG_LEVELS)}."
        )

    return ServiceConfig(
        service_name=service_name,
        environment=environment,
        log_level=log_level,
    )
