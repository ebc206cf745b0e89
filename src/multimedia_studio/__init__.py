"""Multimedia studio: Gemini relay and client workflow engine."""

__version__ = "1.0.0"
