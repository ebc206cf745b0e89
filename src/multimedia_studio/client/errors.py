"""Errors raised by the studio client.

Every error renders as one human-readable message via ``str()`` so the
presentation layer can show it directly.
"""

from __future__ import annotations


class StudioError(Exception):
    """Base class for client workflow failures."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class BadRequestError(StudioError):
    """The relay rejected the request shape."""


class UnconfiguredError(StudioError):
    """The relay has no server-held credential configured."""


class UnauthorizedError(StudioError):
    """The credential was rejected or is missing."""


class EmptyResultError(StudioError):
    """The model answered successfully but produced no content."""


class IncompleteResultError(StudioError):
    """A video job finished without a retrievable media URI."""


class TransportError(StudioError):
    """The relay could not be reached or answered with garbage."""


class RemoteServiceError(StudioError):
    """Any other failure reported by the relay on behalf of Gemini."""
