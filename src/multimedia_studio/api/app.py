"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings, get_settings
from .routes import relay

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info("Multimedia studio relay starting (credential mode: %s)", settings.credential_mode)
    if settings.uses_server_credential and not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; relay calls will fail until it is configured")

    yield

    logger.info("Multimedia studio relay shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Multimedia Studio Relay",
        description="Credential relay for Gemini image and Veo video generation",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(relay.router, prefix="/api/relay", tags=["relay"])

    @app.get("/health")
    async def health_check(settings: Settings = Depends(get_settings)):
        """Health check endpoint."""
        return {"status": "healthy", "credentialMode": settings.credential_mode}

    return app


app = create_app()
