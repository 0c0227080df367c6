"""
Glitch Core

Shared domain types for the Glitch website backend services.
"""

from .errors import GlitchError

__all__ = ["GlitchError"]
