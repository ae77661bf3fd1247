"""Groq API client package: async HTTP interface to the speech and chat services.

WHY: The pipeline needs to transcribe audio chunks, translate audio directly
to English, and translate subtitle text. This package encapsulates all Groq
communication behind one async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response data is parsed
into typed dataclasses defined in models.py.

RULES:
- All HTTP calls go through GroqClient (no direct httpx usage elsewhere)
- Authentication is via Bearer token from config
"""

from subtitle_generator.api.client import GroqAPIError, GroqClient
from subtitle_generator.api.models import TranscriptionResult

__all__ = ["GroqAPIError", "GroqClient", "TranscriptionResult"]
