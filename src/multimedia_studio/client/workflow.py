"""Client workflow engine that drives the relay.

Processing flow:
    1. Build the operation payload in the JSON shape the relay forwards to Gemini.
    2. POST ``{endpoint, payload}`` (plus ``apiKey`` in client mode) to the relay.
    3. Map relay failures onto ``StudioError`` subclasses with one readable message.
    4. For videos, poll ``getVideosOperation`` every poll interval until the
       operation is done, then return its media URI.

Credential handling:
    - Server mode never sends or stores a key; the relay embeds its own key in
      returned video URIs.
    - Client mode caches one key in a ``CredentialStore``. It is written only by
      ``update_credential`` and cleared when a probe fails or the relay reports
      the key as rejected.

Polling has no attempt cap or overall timeout. Cancelling the awaiting task
stops polling; the remote operation keeps running.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Iterable

import httpx

from ..config import Settings, get_settings
from ..relay.dispatcher import RelayEndpoint, append_key_to_uri
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
from .models import EditedImagePart, ImageEditResult, VideoJobHandle, resolve_video_model, to_data_uri

logger = logging.getLogger(__name__)

IMAGE_OUTPUT_MIME_TYPE = "image/png"


def _encode_image(image: bytes | str) -> str:
    if isinstance(image, bytes):
        return base64.b64encode(image).decode("ascii")
    return image


def _error_from_response(response: httpx.Response, endpoint: str) -> StudioError:
    """Translate a non-2xx relay response into a client error."""
    try:
        data = response.json()
    except ValueError:
        return TransportError(
            f"Failed to call endpoint {endpoint} with status {response.status_code}. "
            "Could not parse error response."
        )

    if not isinstance(data, dict):
        data = {}
    message = data.get("error") or f"An unknown error occurred while calling endpoint {endpoint}"
    reason = data.get("reason")

    if reason == "unauthorized":
        return UnauthorizedError(f"Invalid or incorrect API key: {message}")
    if reason == "unconfigured":
        return UnconfiguredError(message)
    if response.status_code in (400, 405):
        return BadRequestError(message)
    return RemoteServiceError(message)


class StudioClient:
    """Async client for image editing, image generation and Veo video generation."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        credential_store: CredentialStore | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._http = http_client
        self._owns_http = http_client is None
        self._store: CredentialStore | None = None
        self._api_key: str | None = None

        if not self._settings.uses_server_credential:
            self._store = credential_store or CredentialStore(self._settings.credential_store_path)
            self._api_key = self._store.load()

    async def __aenter__(self) -> StudioClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    @property
    def credential_mode(self) -> str:
        return self._settings.credential_mode

    @property
    def api_key(self) -> str | None:
        """Cached client-mode credential, always None in server mode."""
        return self._api_key

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._settings.relay_timeout_seconds)
        return self._http

    def _forget_credential(self) -> None:
        self._api_key = None
        if self._store is not None:
            self._store.clear()

    async def _call_relay(
        self,
        endpoint: RelayEndpoint,
        payload: dict[str, Any],
        api_key: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"endpoint": endpoint.value, "payload": payload}
        key = None
        if not self._settings.uses_server_credential:
            key = api_key if api_key is not None else self._api_key
            if not key:
                raise UnauthorizedError("No Gemini API key is set. Enter your API key to continue.")
            body["apiKey"] = key

        try:
            response = await self._get_http().post(self._settings.relay_url, json=body)
        except httpx.HTTPError as e:
            raise TransportError(f"Could not reach the relay while calling {endpoint.value}: {e}", e) from e

        if not response.is_success:
            error = _error_from_response(response, endpoint.value)
            logger.error("[STUDIO_CLIENT] Error calling %s: %s", endpoint.value, error)
            if isinstance(error, UnauthorizedError) and key is not None and key == self._api_key:
                self._forget_credential()
            raise error

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"The relay returned an unreadable response for {endpoint.value}.", e) from e
        if not isinstance(data, dict):
            raise TransportError(f"The relay returned an unexpected response for {endpoint.value}.")
        return data

    async def check_readiness(self) -> bool:
        """Return True when the relay can reach Gemini with the active credential. Never raises."""
        if not self._settings.uses_server_credential and not self._api_key:
            return False
        try:
            await self._call_relay(RelayEndpoint.VALIDATE, {})
        except Exception as e:
            logger.warning("[STUDIO_CLIENT] Readiness check failed: %s", e)
            if not self._settings.uses_server_credential:
                self._forget_credential()
            return False
        return True

    async def update_credential(self, api_key: str | None) -> bool:
        """Validate and persist a user-supplied API key (client mode only).

        An empty value clears the stored key. A key that fails validation is
        not stored and clears any previous one.
        """
        if self._settings.uses_server_credential:
            raise BadRequestError("API keys are managed by the relay in server credential mode.")

        key = (api_key or "").strip()
        if not key:
            self._forget_credential()
            return False

        try:
            await self._call_relay(RelayEndpoint.VALIDATE, {}, api_key=key)
        except Exception as e:
            logger.warning("[STUDIO_CLIENT] API key validation failed: %s", e)
            self._forget_credential()
            return False

        self._api_key = key
        if self._store is not None:
            self._store.save(key)
        return True

    async def generate_image(self, prompt: str) -> list[str]:
        """Generate one image from a prompt and return it as a data URI list."""
        payload = {
            "model": self._settings.imagen_model,
            "prompt": prompt,
            "config": {
                "numberOfImages": 1,
                "outputMimeType": IMAGE_OUTPUT_MIME_TYPE,
            },
        }
        response = await self._call_relay(RelayEndpoint.GENERATE_IMAGES, payload)

        uris = []
        for generated in response.get("generatedImages") or []:
            image = generated.get("image") or {}
            if image.get("imageBytes"):
                mime_type = image.get("mimeType") or IMAGE_OUTPUT_MIME_TYPE
                uris.append(to_data_uri(mime_type, image["imageBytes"]))

        if not uris:
            raise EmptyResultError("The model did not return any images. Please try a different prompt.")
        return uris

    async def edit_image(self, image_bytes: bytes | str, mime_type: str, prompt: str) -> list[EditedImagePart]:
        """Edit an image with a text instruction.

        Returns text and image parts in the order the model produced them.
        """
        payload = {
            "model": self._settings.image_edit_model,
            "contents": {
                "parts": [
                    {"inlineData": {"data": _encode_image(image_bytes), "mimeType": mime_type}},
                    {"text": prompt},
                ],
            },
            "config": {"responseModalities": ["IMAGE", "TEXT"]},
        }
        response = await self._call_relay(RelayEndpoint.GENERATE_CONTENT, payload)

        results: list[EditedImagePart] = []
        candidates = response.get("candidates") or []
        if candidates:
            content = candidates[0].get("content") or {}
            for part in content.get("parts") or []:
                mapped = EditedImagePart.from_part(part)
                if mapped is not None:
                    results.append(mapped)

        if not results:
            raise EmptyResultError(
                "The model did not return any content. Please try a different prompt or image."
            )
        return results

    async def edit_images(
        self,
        images: Iterable[tuple[str, bytes | str, str]],
        prompt: str,
    ) -> list[ImageEditResult]:
        """Edit ``(name, bytes, mime_type)`` images one by one with the same prompt.

        A failing image is reported in its result and does not stop the batch.
        """
        results = []
        for name, image_bytes, mime_type in images:
            try:
                parts = await self.edit_image(image_bytes, mime_type, prompt)
            except StudioError as e:
                logger.warning("[STUDIO_CLIENT] Editing %s failed: %s", name, e)
                results.append(ImageEditResult(name=name, error=str(e)))
                continue
            results.append(ImageEditResult(name=name, parts=parts))
        return results

    async def generate_video(
        self,
        prompt: str,
        model_id: str | None = None,
        image_bytes: bytes | str | None = None,
        mime_type: str | None = None,
    ) -> str:
        """Start a Veo job, poll it to completion and return the media URI."""
        params: dict[str, Any] = {
            "model": resolve_video_model(model_id or self._settings.veo_model),
            "prompt": prompt,
            "config": {"numberOfVideos": 1},
        }
        if image_bytes and mime_type:
            params["image"] = {"imageBytes": _encode_image(image_bytes), "mimeType": mime_type}

        api_key = self._api_key
        response = await self._call_relay(RelayEndpoint.GENERATE_VIDEOS, params)
        try:
            handle = VideoJobHandle.from_dict(response)
        except ValueError as e:
            raise RemoteServiceError("Video generation did not return an operation to follow.", e) from e
        logger.info("[STUDIO_CLIENT] Video operation started: %s", handle.name)

        polls = 0
        while not handle.done:
            await asyncio.sleep(self._settings.video_poll_interval_seconds)
            response = await self._call_relay(
                RelayEndpoint.GET_VIDEOS_OPERATION,
                {"operationName": handle.name},
            )
            try:
                handle = handle.advance(VideoJobHandle.from_dict(response, default_name=handle.name))
            except ValueError as e:
                raise RemoteServiceError(f"Video operation {handle.name} returned an inconsistent status.", e) from e
            polls += 1
            logger.debug("[STUDIO_CLIENT] Poll %d for %s: done=%s", polls, handle.name, handle.done)

        if not handle.result_uri:
            logger.error(
                "[STUDIO_CLIENT] Operation %s finished without media: %s",
                handle.name,
                response.get("error"),
            )
            raise IncompleteResultError("Video generation completed, but no download link was found.")

        if not self._settings.uses_server_credential and api_key:
            return append_key_to_uri(handle.result_uri, api_key)
        return handle.result_uri
