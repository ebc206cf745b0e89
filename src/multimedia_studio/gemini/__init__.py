"""Gemini remote service adapter."""

from .service import GeminiService

__all__ = ["GeminiService"]
