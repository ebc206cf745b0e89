"""API route modules."""

from . import relay

__all__ = ["relay"]
