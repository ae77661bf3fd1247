"""Async HTTP client for the Groq speech-to-text and chat completion APIs.

WHY: The subtitle pipeline needs three remote capabilities: transcribe a
chunk of audio with segment timestamps, translate a chunk of audio straight
into English, and translate numbered subtitle lines into another language.
This module puts all three behind one explicitly constructed client so the
pipeline never touches HTTP details or global connection state.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GroqClient is an async
context manager: enter it to get an authenticated client, exit to close the
connection pool. Audio endpoints are called with multipart/form-data and
response_format=verbose_json; batch translation goes through
/chat/completions with a fixed subtitle-translation system prompt.

RULES:
- Always use the async context manager (async with GroqClient(...) as client:)
- Non-2xx responses raise GroqAPIError with the status and response body
- quality="high" selects GROQ_HIGH_QUALITY_MODEL, anything else the turbo model
- language None or "auto" lets the model detect the language
- No retries: a failed call is reported once and the caller decides
- translate_batch satisfies caption_engine.TranslationOracle
"""

from __future__ import annotations

import httpx

from subtitle_generator.api.models import TranscriptionResult
from subtitle_generator.config import (
    GROQ_BASE_URL,
    GROQ_CHAT_MODEL,
    GROQ_HIGH_QUALITY_MODEL,
    GROQ_TRANSCRIPTION_MODEL,
    GROQ_TRANSLATION_MODEL,
    load_api_key,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_AUDIO_FILENAME = "audio.wav"
_AUDIO_MEDIA_TYPE = "audio/wav"
_CHAT_TEMPERATURE = 0.1

_TRANSLATION_PROMPT = (
    "Translate the following numbered subtitles to {language}. "
    "Maintain the numbering format [N] exactly. Keep translations concise and "
    "natural for subtitles. If there's a | symbol, it represents a line break - "
    "preserve the approximate break position. Return only the translated subtitles."
)


class GroqAPIError(Exception):
    """Raised when the Groq API returns an error response.

    WHY: Callers need a typed exception to distinguish API failures from
    network errors or bugs, and the user must see the service's own message.

    RULES:
    - Always include status_code and message
    - message is the response body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Groq API error {status_code}: {message}")


class GroqClient:
    """Async client for Groq audio transcription, translation and chat.

    WHY: Provides a clean, typed interface for every remote call the
    pipeline makes, and is passed into the pipeline explicitly so tests can
    swap it for a fake.

    HOW: Wraps httpx.AsyncClient with Bearer token auth. A custom transport
    may be injected (tests use httpx.MockTransport).

    RULES:
    - Use as: async with GroqClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url defaults to GROQ_BASE_URL from config
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or GROQ_BASE_URL).rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GroqClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(300.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GroqClient must be used as an async context manager: "
                "async with GroqClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Audio: transcription
    # ------------------------------------------------------------------

    async def transcribe(
        self,
        audio: bytes,
        language: str | None = None,
        quality: str = "standard",
    ) -> TranscriptionResult:
        """Transcribe one audio chunk and return its timed segments.

        WHY: Segment-level timestamps are the raw material of the caption
        engine. Word-level timestamps are not requested; the engine
        estimates them.

        HOW: POSTs the audio as multipart/form-data to /audio/transcriptions
        with response_format=verbose_json and segment granularity, at
        temperature 0 for repeatable output.

        RULES:
        - audio is expected to be mono 16 kHz WAV, at most ~20 MB
        - Raises GroqAPIError on non-2xx responses

        Args:
            audio: WAV bytes of one chunk.
            language: ISO 639-1 source language, or None/"auto" to detect.
            quality: "high" for the full model, anything else for turbo.

        Returns:
            TranscriptionResult with chunk-relative segments.
        """
        data = {
            "model": GROQ_HIGH_QUALITY_MODEL if quality == "high" else GROQ_TRANSCRIPTION_MODEL,
            "response_format": "verbose_json",
            "timestamp_granularities[]": "segment",
            "temperature": "0",
        }
        if language and language != "auto":
            data["language"] = language

        return await self._post_audio("/audio/transcriptions", audio, data)

    # ------------------------------------------------------------------
    # Audio: direct translation to English
    # ------------------------------------------------------------------

    async def translate_direct(self, audio: bytes) -> TranscriptionResult:
        """Transcribe one audio chunk straight into English.

        Same response shape as transcribe(); segment text is English.
        Raises GroqAPIError on non-2xx responses.
        """
        data = {
            "model": GROQ_TRANSLATION_MODEL,
            "response_format": "verbose_json",
            "temperature": "0",
        }
        return await self._post_audio("/audio/translations", audio, data)

    # ------------------------------------------------------------------
    # Chat: numbered subtitle batch translation
    # ------------------------------------------------------------------

    async def translate_batch(self, text: str, target_language: str) -> str:
        """Translate a block of "[N] text" subtitle lines.

        WHY: Post-transcription translation into languages other than
        English goes through a chat model. The reply format is best-effort;
        the caption engine parses what it can.

        RULES:
        - Returns the first choice's content, stripped ("" if absent)
        - Raises GroqAPIError on non-2xx responses
        """
        client = self._ensure_client()
        body = {
            "model": GROQ_CHAT_MODEL,
            "temperature": _CHAT_TEMPERATURE,
            "messages": [
                {"role": "system", "content": _TRANSLATION_PROMPT.format(language=target_language)},
                {"role": "user", "content": text},
            ],
        }

        resp = await client.post("/chat/completions", json=body)
        if resp.status_code != 200:
            raise GroqAPIError(resp.status_code, resp.text)

        choices = resp.json().get("choices") or []
        if not choices:
            return ""
        content = (choices[0].get("message") or {}).get("content")
        return (content or "").strip()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _post_audio(self, path: str, audio: bytes, data: dict) -> TranscriptionResult:
        client = self._ensure_client()
        resp = await client.post(
            path,
            data=data,
            files={"file": (_AUDIO_FILENAME, audio, _AUDIO_MEDIA_TYPE)},
        )
        if resp.status_code != 200:
            raise GroqAPIError(resp.status_code, resp.text)
        return TranscriptionResult.from_dict(resp.json())
