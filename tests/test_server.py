"""Tests for the FastAPI subtitle API.

WHY: The HTTP API is the main integration surface. Status codes, response
shape and error messages must match what clients expect, for both SRT and
embedded output.

HOW: FastAPI TestClient drives the app in-process. generate_subtitles and
GroqClient are patched so neither ffmpeg nor the Groq API is involved.

RULES:
- Each test patches its own pipeline result
- The real pipeline is never run
"""

from __future__ import annotations

import base64
import io
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from caption_engine import Caption, generate_srt
from subtitle_generator.api.client import GroqAPIError
from subtitle_generator.media import MediaError
from subtitle_generator.pipeline import SubtitleOutput, SubtitleResult
from subtitle_generator.server.app import app


class _NullGroqClient:
    def __init__(self, *args, **kwargs):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


def _result(video_bytes=None):
    captions = [Caption(0, 1500, "Hello world"), Caption(1600, 3000, "Goodbye")]
    return SubtitleOutput(
        result=SubtitleResult(captions=captions, srt=generate_srt(captions), segment_count=2),
        video_bytes=video_bytes,
    )


def _video(name="clip.mp4", content=b"fake video data"):
    return {"video": (name, io.BytesIO(content), "video/mp4")}


@pytest.fixture
def client():
    with patch("subtitle_generator.server.app.GroqClient", _NullGroqClient):
        yield TestClient(app)


class TestCreateSubtitles:
    """POST /subtitles."""

    def test_srt_response(self, client):
        with patch("subtitle_generator.server.app.generate_subtitles",
                   new=AsyncMock(return_value=_result())) as pipeline:
            resp = client.post("/subtitles", files=_video(), data={"source_language": "en"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["format"] == "srt"
        assert body["subtitles"].startswith("1\n00:00:00,000 --> 00:00:01,500\nHello world\n")
        assert body["video_with_subtitles"] is None
        assert body["caption_count"] == 2

        options = pipeline.call_args.args[2]
        assert options.source_language == "en"
        assert options.output_format == "srt"

    def test_embedded_response_is_base64(self, client):
        with patch("subtitle_generator.server.app.generate_subtitles",
                   new=AsyncMock(return_value=_result(video_bytes=b"\x00\x01mp4"))):
            resp = client.post("/subtitles", files=_video(), data={"output_format": "embedded"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["format"] == "embedded"
        assert base64.b64decode(body["video_with_subtitles"]) == b"\x00\x01mp4"

    def test_translation_options_forwarded(self, client):
        with patch("subtitle_generator.server.app.generate_subtitles",
                   new=AsyncMock(return_value=_result())) as pipeline:
            client.post(
                "/subtitles",
                files=_video(),
                data={"source_language": "sv", "translate_to": "de", "quality": "high"},
            )
        options = pipeline.call_args.args[2]
        assert options.translate_to == "de"
        assert options.quality == "high"
        assert options.post_translation

    def test_empty_upload_is_400(self, client):
        resp = client.post("/subtitles", files=_video(content=b""))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No video file provided"

    def test_unsupported_extension_is_400(self, client):
        resp = client.post("/subtitles", files=_video(name="notes.txt"))
        assert resp.status_code == 400
        assert "Unsupported file type" in resp.json()["detail"]

    def test_invalid_quality_is_400(self, client):
        resp = client.post("/subtitles", files=_video(), data={"quality": "ultra"})
        assert resp.status_code == 400
        assert "quality" in resp.json()["detail"]

    def test_missing_file_is_422(self, client):
        resp = client.post("/subtitles", data={"source_language": "en"})
        assert resp.status_code == 422

    def test_oracle_failure_is_500_with_message(self, client):
        with patch("subtitle_generator.server.app.generate_subtitles",
                   new=AsyncMock(side_effect=GroqAPIError(401, "Invalid API Key"))):
            resp = client.post("/subtitles", files=_video())
        assert resp.status_code == 500
        assert "Invalid API Key" in resp.json()["detail"]

    def test_ffmpeg_failure_is_500(self, client):
        with patch("subtitle_generator.server.app.generate_subtitles",
                   new=AsyncMock(side_effect=MediaError("ffmpeg failed (exit 1): broken"))):
            resp = client.post("/subtitles", files=_video())
        assert resp.status_code == 500
        assert "broken" in resp.json()["detail"]


class TestHealth:
    """GET /health."""

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": "0.1.0"}
