"""
Studio Core

Shared domain types for the Studio backend services.
"""

from .errors import StudioError

__all__ = ["StudioError"]
