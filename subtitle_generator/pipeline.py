"""End-to-end subtitle pipeline: audio chunks in, SRT (and optionally video) out.

WHY: The CLI and the HTTP server run exactly the same steps: extract the
audio, cut it into upload-sized chunks, send every chunk to the speech
oracle, stitch the chunk results onto one timeline, build the cues, and
optionally translate and burn them in. Keeping those steps in one module
means both front ends behave identically.

HOW: run_pipeline() is the oracle-facing half. It takes already-cut chunks
and an injected client, so tests drive it with a fake client and no ffmpeg.
generate_subtitles() wraps it with the media steps, which run in a worker
thread so the server's event loop stays responsive.

RULES:
- Chunks are sent one at a time, in ascending start order
- A failed transcription call aborts the whole run (GroqAPIError propagates)
- Direct translation (audio straight to English) replaces transcription;
  post translation rewrites cue text after the cues are built
- The caption config is read once per run and passed down unchanged
- All temporary files go to the caller's work_dir
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Tuple

from caption_engine import (
    AudioChunk,
    Caption,
    align_chunk_segments,
    build_captions,
    generate_srt,
    translate_captions,
)
from subtitle_generator import media
from subtitle_generator.api.client import GroqClient
from subtitle_generator.config import load_caption_config

logger = logging.getLogger(__name__)

QUALITY_CHOICES = ("standard", "high")
OUTPUT_FORMATS = ("srt", "embedded")


# ---------------------------------------------------------------------------
# Options and results
# ---------------------------------------------------------------------------


@dataclass
class SubtitleOptions:
    """User-facing knobs for one subtitle run.

    RULES:
    - source_language: ISO 639-1 code, or "auto" to let the model detect it
    - translate_to: ISO 639-1 code, or "none"/None for no translation
    - quality: "standard" (turbo model) or "high" (full model)
    - output_format: "srt" or "embedded" (burned into the video)
    - Invalid quality/output_format raise ValueError at construction
    """

    source_language: str = "auto"
    translate_to: Optional[str] = None
    quality: str = "standard"
    output_format: str = "srt"

    def __post_init__(self) -> None:
        if self.quality not in QUALITY_CHOICES:
            raise ValueError(
                "Invalid quality '{}'. Choose one of: {}".format(
                    self.quality, ", ".join(QUALITY_CHOICES)
                )
            )
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                "Invalid output format '{}'. Choose one of: {}".format(
                    self.output_format, ", ".join(OUTPUT_FORMATS)
                )
            )

    @property
    def direct_translation(self) -> bool:
        """True when the audio should be translated straight into English."""
        return (
            self.translate_to == "en"
            and bool(self.source_language)
            and self.source_language != "en"
        )

    @property
    def post_translation(self) -> bool:
        """True when finished cues should be translated by the chat model."""
        return (
            bool(self.translate_to)
            and self.translate_to not in ("en", "none")
            and not self.direct_translation
        )


@dataclass
class SubtitleResult:
    """Cues, their SRT rendering, and how many oracle segments fed them."""

    captions: list[Caption] = field(default_factory=list)
    srt: str = ""
    segment_count: int = 0


@dataclass
class SubtitleOutput:
    """A SubtitleResult plus the re-encoded video when subtitles were burned in."""

    result: SubtitleResult
    video_bytes: Optional[bytes] = None


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


async def run_pipeline(
    client: GroqClient,
    chunks: Sequence[Tuple[AudioChunk, Path]],
    options: SubtitleOptions,
    config: Optional[dict] = None,
) -> SubtitleResult:
    """Transcribe chunk files and turn the result into subtitle cues.

    WHY: This is the part of the run that talks to the oracle; it is kept
    free of ffmpeg so it can be exercised with a fake client.

    HOW: Sends each chunk to translate_direct() or transcribe() in order,
    shifts and dedupes the chunk segments, builds repaired cues, runs the
    optional batch translation, and encodes SRT.

    Args:
        client: An entered GroqClient (or any object with the same methods).
        chunks: (chunk, audio file) pairs from media.split_audio().
        options: The run's SubtitleOptions.
        config: Caption constraint dict; defaults to load_caption_config().

    Returns:
        SubtitleResult with the final cues and SRT text.
    """
    cfg = config if config is not None else load_caption_config()
    ordered = sorted(chunks, key=lambda pair: pair[0].start_ms)

    chunk_results = []
    for index, (chunk, path) in enumerate(ordered, 1):
        logger.info(
            "Processing chunk %d/%d (%.1fs at %.1fs)",
            index, len(ordered), chunk.duration_ms / 1000.0, chunk.start_ms / 1000.0,
        )
        audio = path.read_bytes()
        if options.direct_translation:
            transcription = await client.translate_direct(audio)
        else:
            transcription = await client.transcribe(
                audio, language=options.source_language, quality=options.quality
            )
        chunk_results.append((chunk, transcription.segments))

    segments = align_chunk_segments(chunk_results)
    logger.info("Received %d segment(s) from %d chunk(s)", len(segments), len(ordered))

    captions = build_captions(segments, cfg)
    logger.info("Built %d caption(s)", len(captions))

    if options.post_translation and captions:
        logger.info("Translating %d caption(s) to %s", len(captions), options.translate_to)
        captions = await translate_captions(captions, options.translate_to, client)

    return SubtitleResult(
        captions=captions,
        srt=generate_srt(captions),
        segment_count=len(segments),
    )


async def generate_subtitles(
    client: GroqClient,
    video_path: Path,
    options: SubtitleOptions,
    work_dir: Path,
    config: Optional[dict] = None,
) -> SubtitleOutput:
    """Produce subtitles for a video file, optionally burned into the picture.

    RULES:
    - Raises MediaError for ffmpeg failures, GroqAPIError for oracle failures
    - video_bytes is set only when options.output_format == "embedded"
    """
    audio_path = await asyncio.to_thread(
        media.extract_audio, video_path, work_dir / "audio.wav"
    )
    chunks = await asyncio.to_thread(media.split_audio, audio_path, work_dir)

    result = await run_pipeline(client, chunks, options, config)

    if options.output_format != "embedded":
        return SubtitleOutput(result=result)

    srt_path = work_dir / "subtitles.srt"
    srt_path.write_text(result.srt, encoding="utf-8")
    out_path = await asyncio.to_thread(
        media.burn_subtitles, video_path, srt_path, work_dir / "subtitled.mp4"
    )
    return SubtitleOutput(result=result, video_bytes=out_path.read_bytes())
