"""API route for the Gemini relay endpoint."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...config import Settings, get_settings
from ...gemini import GeminiService
from ...relay import RelayError, dispatch

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service_factory():
    """Dependency returning the callable that builds a Gemini service for a key."""
    return GeminiService


@router.post("")
async def relay(
    request: Request,
    settings: Settings = Depends(get_settings),
    service_factory=Depends(get_service_factory),
):
    """Forward one operation to Gemini with the resolved credential."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(status_code=400, content={"error": "Request body must be valid JSON"})

    try:
        result = await dispatch(body, settings, service_factory)
    except RelayError as e:
        if e.status_code >= 500:
            logger.error("[RELAY] %s (%s)", e.message, e.reason)
        else:
            logger.info("[RELAY] Rejected request: %s", e.message)
        return JSONResponse(status_code=e.status_code, content=e.to_body())

    return JSONResponse(status_code=200, content=result)


@router.api_route("", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"], include_in_schema=False)
async def relay_method_not_allowed():
    return JSONResponse(status_code=405, content={"error": "Method not allowed"})
