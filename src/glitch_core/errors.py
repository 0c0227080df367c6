from __future__ import annotations

from service_core.errors import ServiceError


class GlitchError(ServiceError):
    """Main error type for Glitch services."""
