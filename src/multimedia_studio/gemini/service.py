"""Thin async adapter over the google-genai SDK used by the relay.

Payloads arrive in the JSON shape the browser SDK speaks (camelCase keys,
base64 strings for binary fields). They are validated into SDK types in JSON
mode so base64 fields decode to bytes, and responses are dumped back to the
same camelCase JSON shape.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


def _to_json(model: Any) -> dict[str, Any]:
    """Serialize an SDK response the way the JS SDK would (camelCase, base64 bytes)."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _validate(model_cls: Any, value: Any) -> Any:
    if value is None:
        return None
    return model_cls.model_validate_json(json.dumps(value))


def _as_contents(contents: Any) -> Any:
    # A bare string is a valid text prompt; structured contents are Content objects.
    if isinstance(contents, str):
        return contents
    if isinstance(contents, list):
        return [item if isinstance(item, str) else _validate(types.Content, item) for item in contents]
    return _validate(types.Content, contents)


class GeminiService:
    """Remote generative service reached with a single API key."""

    def __init__(self, api_key: str, client: genai.Client | None = None) -> None:
        self._client = client or genai.Client(api_key=api_key)

    async def probe(self, model: str, prompt: str = "Hi") -> str:
        """Issue a minimal content request to confirm the key works."""
        response = await self._client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                thinking_config=types.ThinkingConfig(thinking_budget=0),
            ),
        )
        return response.text or ""

    async def generate_images(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.aio.models.generate_images(
            model=payload.get("model"),
            prompt=payload.get("prompt"),
            config=_validate(types.GenerateImagesConfig, payload.get("config")),
        )
        return _to_json(response)

    async def generate_content(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.aio.models.generate_content(
            model=payload.get("model"),
            contents=_as_contents(payload.get("contents")),
            config=_validate(types.GenerateContentConfig, payload.get("config")),
        )
        return _to_json(response)

    async def generate_videos(self, payload: dict[str, Any]) -> dict[str, Any]:
        operation = await self._client.aio.models.generate_videos(
            model=payload.get("model"),
            prompt=payload.get("prompt"),
            image=_validate(types.Image, payload.get("image")),
            config=_validate(types.GenerateVideosConfig, payload.get("config")),
        )
        logger.info("[GEMINI] Started video operation %s", operation.name)
        return _to_json(operation)

    async def get_operation_status(self, operation_name: str) -> dict[str, Any]:
        """Fetch the current state of a video operation by name."""
        operation = types.GenerateVideosOperation(name=operation_name)
        operation = await self._client.aio.operations.get(operation)
        return _to_json(operation)
