from __future__ import annotations

from service_core.errors import ServiceError


class StudioError(ServiceError):
    """Main error type for Studio services."""
