"""FastAPI application exposing subtitle generation over HTTP.

WHY: Web front ends and automation tools need to upload a video and get
subtitles back without installing the CLI. FastAPI provides request
validation, multipart uploads and automatic OpenAPI documentation.

HOW: POST /subtitles accepts a multipart video upload plus form fields,
runs the full pipeline inside a TemporaryDirectory with a per-request
GroqClient, and answers synchronously with the SRT text, or with the
re-encoded video as base64 when output_format is "embedded".
GET /health is a liveness probe.

RULES:
- Every endpoint documents its parameters and responses for OpenAPI
- Error responses use the ErrorResponse schema ({"detail": ...})
- 400 for an empty upload, an unsupported extension or invalid options
- 500 with the failure message when ffmpeg or the Groq API fails
- Nothing is kept on disk after the response is sent
"""

from __future__ import annotations

import base64
import logging
import tempfile
from pathlib import Path
from typing import Annotated, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from subtitle_generator import __version__
from subtitle_generator.api.client import GroqClient
from subtitle_generator.config import SUPPORTED_MEDIA_FORMATS, load_caption_config
from subtitle_generator.pipeline import SubtitleOptions, generate_subtitles
from subtitle_generator.server.models import (
    ErrorResponse,
    HealthResponse,
    SubtitleResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Subtitle Generator API",
    description=(
        "Generate subtitles for an uploaded video using Groq Whisper models. "
        "Returns SubRip text, optionally translated, or a copy of the video "
        "with the subtitles burned in."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_file_extension(filename: str) -> str:
    """Return the lowercase extension, raising HTTPException if unsupported."""
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_MEDIA_FORMATS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_MEDIA_FORMATS))
            ),
        )
    return ext


# ---------------------------------------------------------------------------
# Endpoints: Subtitles
# ---------------------------------------------------------------------------


@app.post(
    "/subtitles",
    response_model=SubtitleResponse,
    tags=["subtitles"],
    summary="Generate subtitles for a video",
    description=(
        "Upload a video (or audio) file. The audio is transcribed with Groq "
        "Whisper, segmented into readable cues, optionally translated, and "
        "returned as SRT text or burned into the video."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Empty upload or invalid options"},
        500: {"model": ErrorResponse, "description": "Transcription or video processing failed"},
    },
)
async def create_subtitles(
    video: Annotated[
        UploadFile,
        File(description="Video or audio file to subtitle."),
    ],
    source_language: Annotated[
        str,
        Form(description="Source language ISO 639-1 code, or 'auto' to detect."),
    ] = "auto",
    translate_to: Annotated[
        Optional[str],
        Form(description="Target language ISO 639-1 code, or 'none' for no translation."),
    ] = None,
    quality: Annotated[
        str,
        Form(description="Model quality: 'standard' or 'high'."),
    ] = "standard",
    output_format: Annotated[
        str,
        Form(description="'srt' for subtitle text, 'embedded' for burned-in video."),
    ] = "srt",
) -> SubtitleResponse:
    filename = video.filename or "upload.mp4"
    ext = _validate_file_extension(filename)

    content = await video.read()
    if not content:
        raise HTTPException(status_code=400, detail="No video file provided")

    try:
        options = SubtitleOptions(
            source_language=source_language,
            translate_to=translate_to,
            quality=quality,
            output_format=output_format,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None

    try:
        config = load_caption_config()
        with tempfile.TemporaryDirectory(prefix="subtitle-api-") as tmp:
            work_dir = Path(tmp)
            video_path = work_dir / "input{}".format(ext)
            video_path.write_bytes(content)

            async with GroqClient() as client:
                output = await generate_subtitles(
                    client, video_path, options, work_dir, config=config
                )
    except Exception as exc:
        logger.exception("Subtitle generation failed for %s", filename)
        raise HTTPException(status_code=500, detail=str(exc)) from None

    result = output.result
    video_b64 = None
    if output.video_bytes is not None:
        video_b64 = base64.b64encode(output.video_bytes).decode("ascii")

    return SubtitleResponse(
        success=True,
        format=options.output_format,
        subtitles=result.srt,
        video_with_subtitles=video_b64,
        caption_count=len(result.captions),
    )


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the subtitle-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
