"""Pydantic response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for response serialization
and automatic OpenAPI documentation. Pydantic models enforce field types at
runtime and generate JSON Schema that appears in the /docs UI.

HOW: One model per response shape. All models include Field descriptions
for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose internal implementation details
- subtitles is set for format "srt", video_with_subtitles for "embedded"
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SubtitleResponse(BaseModel):
    """Result of a subtitle generation request.

    RULES:
    - format is "srt" or "embedded"
    - subtitles holds the SRT text (always present, also for embedded runs)
    - video_with_subtitles is the base64-encoded MP4 for embedded runs only
    """

    success: bool = Field(description="True when subtitles were generated.")
    format: str = Field(description="Output format: 'srt' or 'embedded'.")
    subtitles: Optional[str] = Field(
        default=None,
        description="Generated subtitles in SubRip (SRT) format.",
    )
    video_with_subtitles: Optional[str] = Field(
        default=None,
        description="Base64-encoded MP4 with burned-in subtitles (embedded format only).",
    )
    caption_count: int = Field(description="Number of subtitle cues generated.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "success": True,
                "format": "srt",
                "subtitles": "1\n00:00:00,000 --> 00:00:01,500\nHello world\n",
                "video_with_subtitles": None,
                "caption_count": 1,
            }
        ]
    }}


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
