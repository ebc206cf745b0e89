"""Credential-holding relay in front of the Gemini API."""

from .dispatcher import (
    RelayEndpoint,
    RelayError,
    append_key_to_uri,
    dispatch,
    resolve_credential,
)

__all__ = [
    "RelayEndpoint",
    "RelayError",
    "append_key_to_uri",
    "dispatch",
    "resolve_credential",
]
