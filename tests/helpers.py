"""Shared test helpers (e.g. a scripted relay for client tests)."""

from __future__ import annotations

import json
from collections import defaultdict

import httpx

from multimedia_studio.config import Settings

RELAY_URL = "http://testserver/api/relay"


def build_settings(mode: str = "server", api_key: str | None = "server-key", **overrides) -> Settings:
    """Build settings isolated from the developer's environment and .env file."""
    values = {
        "CREDENTIAL_MODE": mode,
        "GEMINI_API_KEY": api_key,
        "RELAY_URL": RELAY_URL,
        "VIDEO_POLL_INTERVAL_SECONDS": 0,
        **overrides,
    }
    return Settings(_env_file=None, **values)


class RelayStub:
    """Scripted stand-in for the relay endpoint.

    Responses queue per endpoint; the last queued response repeats once the
    queue is drained. Queue an exception to simulate a transport failure.
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self._responses: dict[str, list] = defaultdict(list)

    def add(self, endpoint: str, body=None, status_code: int = 200, error: Exception | None = None):
        self._responses[endpoint].append((status_code, body, error))
        return self

    def calls_to(self, endpoint: str) -> list[dict]:
        return [call for call in self.calls if call["endpoint"] == endpoint]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        queue = self._responses[body["endpoint"]]
        if not queue:
            raise AssertionError(f"unexpected relay call: {body['endpoint']}")
        status_code, payload, error = queue.pop(0) if len(queue) > 1 else queue[0]
        if error is not None:
            raise error
        if isinstance(payload, str):
            return httpx.Response(status_code, text=payload)
        return httpx.Response(status_code, json=payload)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self._handle))


def video_operation(name: str = "operations/op-1", done: bool = False, uri: str | None = None) -> dict:
    """Build a relay getVideosOperation response body."""
    operation: dict = {"name": name, "done": done}
    if uri is not None:
        operation["response"] = {"generatedVideos": [{"video": {"uri": uri}}]}
    return operation
