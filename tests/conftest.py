"""Shared test fixtures and configuration."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from multimedia_studio.api.app import create_app
from multimedia_studio.api.routes.relay import get_service_factory
from multimedia_studio.config import Settings, get_settings

from tests.helpers import build_settings


@pytest.fixture
def server_settings():
    return build_settings("server", "server-key")


@pytest.fixture
def client_settings():
    return build_settings("client", None)


@pytest.fixture
def fake_service():
    """Mock Gemini service; ``keys`` records the credential each call was built with."""
    service = MagicMock()
    service.keys = []
    service.probe = AsyncMock(return_value="Hello!")
    service.generate_images = AsyncMock(return_value={"generatedImages": []})
    service.generate_content = AsyncMock(return_value={"candidates": []})
    service.generate_videos = AsyncMock(return_value={"name": "operations/op-1", "done": False})
    service.get_operation_status = AsyncMock(return_value={"name": "operations/op-1", "done": False})
    return service


@pytest.fixture
def service_factory(fake_service):
    def factory(api_key: str):
        fake_service.keys.append(api_key)
        return fake_service

    return factory


@pytest.fixture
def make_app(service_factory):
    """Build the relay app with settings and the Gemini service overridden."""

    def _make(settings: Settings):
        app = create_app()
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_service_factory] = lambda: service_factory
        return app

    return _make


@pytest.fixture
def sample_image_bytes():
    return b"\x89PNG\r\n\x1a\nfake-image"
