"""Runtime configuration for the multimedia studio relay and client."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CredentialMode = Literal["server", "client"]


class Settings(BaseSettings):
    """Runtime configuration for the multimedia studio."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Deployment mode: "server" keeps the Gemini key in the relay environment,
    # "client" expects the caller to send it with every relay request.
    credential_mode: CredentialMode = Field(default="server", alias="CREDENTIAL_MODE")

    # Gemini API (server mode only)
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")

    # Models
    validate_model: str = Field(default="gemini-2.5-flash", alias="VALIDATE_MODEL")
    imagen_model: str = Field(default="imagen-4.0-generate-001", alias="IMAGEN_MODEL")
    image_edit_model: str = Field(default="gemini-2.5-flash-image-preview", alias="IMAGE_EDIT_MODEL")
    veo_model: str = Field(default="veo-2.0-generate-001", alias="VEO_MODEL")

    # Client workflow
    relay_url: str = Field(default="http://localhost:8083/api/relay", alias="RELAY_URL")
    relay_timeout_seconds: float = Field(default=120.0, alias="RELAY_TIMEOUT_SECONDS")
    video_poll_interval_seconds: float = Field(default=10.0, alias="VIDEO_POLL_INTERVAL_SECONDS", ge=0)
    credential_store_path: Path = Field(
        default=Path("~/.multimedia_studio/credentials.json"),
        alias="CREDENTIAL_STORE_PATH",
    )

    # FastAPI
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8083, alias="APP_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    @property
    def uses_server_credential(self) -> bool:
        return self.credential_mode == "server"


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings so multiple imports share a single instance."""

    return Settings()  # type: ignore[call-arg]
