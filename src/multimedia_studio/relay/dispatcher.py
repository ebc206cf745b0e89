"""Relay request dispatch: shape checks, credential resolution, forwarding."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from google.genai import errors as genai_errors

from ..config import Settings
from ..gemini import GeminiService

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = (
    "An internal server error occurred while contacting the Gemini API via the relay."
)

ServiceFactory = Callable[[str], GeminiService]


class RelayEndpoint(str, Enum):
    VALIDATE = "validate"
    GENERATE_IMAGES = "generateImages"
    GENERATE_CONTENT = "generateContent"
    GENERATE_VIDEOS = "generateVideos"
    GET_VIDEOS_OPERATION = "getVideosOperation"


class RelayError(Exception):
    """A relay failure that maps directly onto an HTTP error response."""

    def __init__(self, status_code: int, message: str, reason: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.reason = reason

    def to_body(self) -> dict[str, str]:
        return {"error": self.message, "reason": self.reason}


def parse_endpoint(value: Any) -> RelayEndpoint:
    try:
        return RelayEndpoint(value)
    except ValueError:
        raise RelayError(400, f"Unknown endpoint: {value}", "bad_request") from None


def resolve_credential(body: dict[str, Any], settings: Settings) -> str:
    """Pick the credential for this call according to the deployment mode.

    Server mode reads only the environment; client mode reads only the body.
    """
    if settings.uses_server_credential:
        if not settings.gemini_api_key:
            raise RelayError(
                500,
                "GEMINI_API_KEY is not configured on the server.",
                "unconfigured",
            )
        return settings.gemini_api_key

    api_key = body.get("apiKey")
    if not api_key:
        raise RelayError(
            400,
            "Missing required parameters: apiKey, endpoint, payload",
            "bad_request",
        )
    return api_key


def append_key_to_uri(uri: str, api_key: str) -> str:
    return f"{uri}&key={api_key}"


def _sign_video_uris(operation: dict[str, Any], api_key: str) -> dict[str, Any]:
    """Embed the key in each generated video URI so media can be fetched directly."""
    if not operation.get("done"):
        return operation
    generated = (operation.get("response") or {}).get("generatedVideos") or []
    for item in generated:
        video = item.get("video") or {}
        if video.get("uri"):
            video["uri"] = append_key_to_uri(video["uri"], api_key)
    return operation


def is_credential_rejected(exc: genai_errors.APIError) -> bool:
    """Return True if the upstream error indicates the API key was refused."""
    if exc.code in (401, 403):
        return True
    text = f"{exc.status or ''} {exc.message or ''}".upper()
    return "API_KEY_INVALID" in text or "API KEY NOT VALID" in text


def _upstream_error(exc: Exception) -> RelayError:
    if isinstance(exc, genai_errors.APIError):
        message = exc.message or str(exc) or DEFAULT_ERROR_MESSAGE
        reason = "unauthorized" if is_credential_rejected(exc) else "upstream_error"
        return RelayError(500, message, reason)
    return RelayError(500, str(exc) or DEFAULT_ERROR_MESSAGE, "upstream_error")


async def dispatch(
    body: Any,
    settings: Settings,
    service_factory: ServiceFactory = GeminiService,
) -> dict[str, Any]:
    """Validate a relay body, forward it to Gemini and return the JSON result.

    Raises RelayError for every failure so the caller can render it as-is.
    """
    if not isinstance(body, dict):
        raise RelayError(400, "Request body must be a JSON object", "bad_request")

    endpoint_value = body.get("endpoint")
    payload = body.get("payload")
    if not endpoint_value or payload is None:
        raise RelayError(400, "Missing required parameters: endpoint, payload", "bad_request")

    endpoint = parse_endpoint(endpoint_value)
    if not isinstance(payload, dict):
        raise RelayError(400, "payload must be a JSON object", "bad_request")

    operation_name = None
    if endpoint is RelayEndpoint.GET_VIDEOS_OPERATION:
        operation_name = payload.get("operationName")
        if not operation_name:
            raise RelayError(400, "Missing required parameter: payload.operationName", "bad_request")

    api_key = resolve_credential(body, settings)
    service = service_factory(api_key)

    try:
        if endpoint is RelayEndpoint.VALIDATE:
            text = await service.probe(settings.validate_model)
            return {"success": True, "text": text}
        if endpoint is RelayEndpoint.GENERATE_IMAGES:
            return await service.generate_images(payload)
        if endpoint is RelayEndpoint.GENERATE_CONTENT:
            return await service.generate_content(payload)
        if endpoint is RelayEndpoint.GENERATE_VIDEOS:
            return await service.generate_videos(payload)

        operation = await service.get_operation_status(operation_name)
    except Exception as exc:
        logger.exception("[RELAY] %s call failed", endpoint.value)
        raise _upstream_error(exc) from exc

    if settings.uses_server_credential:
        operation = _sign_video_uris(operation, api_key)
    return operation
