"""Async client workflow engine for the relay."""

from .credentials import CredentialStore
from .errors import (
    BadRequestError,
    EmptyResultError,
    IncompleteResultError,
    RemoteServiceError,
    StudioError,
    TransportError,
    UnauthorizedError,
    UnconfiguredError,
)
from .models import (
    VEO_MODELS,
    EditedImagePart,
    ImageEditResult,
    PartKind,
    VideoJobHandle,
    edited_filename,
    resolve_video_model,
)
from .workflow import StudioClient

__all__ = [
    "BadRequestError",
    "CredentialStore",
    "EditedImagePart",
    "EmptyResultError",
    "ImageEditResult",
    "IncompleteResultError",
    "PartKind",
    "RemoteServiceError",
    "StudioClient",
    "StudioError",
    "TransportError",
    "UnauthorizedError",
    "UnconfiguredError",
    "VEO_MODELS",
    "VideoJobHandle",
    "edited_filename",
    "resolve_video_model",
]
