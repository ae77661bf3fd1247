"""ffmpeg/ffprobe helpers: audio extraction, chunking, and subtitle burn-in.

WHY: The speech API accepts at most ~20 MB of audio per request, so the
video's audio track has to be extracted as compact mono 16 kHz WAV and, when
still too large, cut into overlapping windows. When the user asks for
embedded subtitles the finished SRT is burned into the video. All of this is
plain ffmpeg work, kept behind a few functions so the pipeline never builds
command lines itself.

HOW: Command builders are pure functions returning argv lists; _run()
executes them with subprocess and turns failures into MediaError.
plan_chunks() decides the chunk windows from the file size and duration
alone, so the chunking policy is testable without ffmpeg.

RULES:
- Files up to 20 MiB are sent whole; larger ones are cut into windows of
  min(300, max(120, duration / 10)) seconds plus a 15 second overlap
- Consecutive chunks start one window apart; the last chunk is truncated
  at the end of the audio
- Chunk audio is mono, 16 kHz WAV, timestamps reset to zero per chunk
- Missing binaries and non-zero exit codes raise MediaError with the tail
  of ffmpeg's stderr
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from caption_engine.models import AudioChunk, seconds_to_ms

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 20 * 1024 * 1024
CHUNK_OVERLAP_S = 15.0
MIN_CHUNK_S = 120.0
MAX_CHUNK_S = 300.0

SAMPLE_RATE = 16000
_STDERR_TAIL = 800

SUBTITLE_STYLE = (
    "FontSize=20,PrimaryColour=&Hffffff,OutlineColour=&H000000,"
    "Outline=2,Shadow=1,MarginV=25,Alignment=2,Bold=0"
)


class MediaError(RuntimeError):
    """Raised when ffmpeg or ffprobe is missing or exits with an error.

    RULES:
    - Message names the failing tool and ends with the tail of its stderr
    """


# ---------------------------------------------------------------------------
# Command builders
# ---------------------------------------------------------------------------


def build_extract_cmd(video_path: Path, out_path: Path) -> list[str]:
    return [
        "ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
        "-i", str(video_path),
        "-vn",
        "-ac", "1",
        "-ar", str(SAMPLE_RATE),
        "-b:a", "64k",
        "-f", "wav",
        str(out_path),
    ]


def build_chunk_cmd(audio_path: Path, chunk: AudioChunk, out_path: Path) -> list[str]:
    return [
        "ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
        "-ss", "{:.3f}".format(chunk.start_ms / 1000.0),
        "-t", "{:.3f}".format(chunk.duration_ms / 1000.0),
        "-i", str(audio_path),
        "-ac", "1",
        "-ar", str(SAMPLE_RATE),
        "-avoid_negative_ts", "make_zero",
        "-f", "wav",
        str(out_path),
    ]


def build_burn_cmd(video_path: Path, srt_path: Path, out_path: Path) -> list[str]:
    subtitles = "subtitles={}:force_style='{}'".format(
        _escape_filter_path(str(srt_path)), SUBTITLE_STYLE
    )
    return [
        "ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
        "-i", str(video_path),
        "-vf", subtitles,
        "-c:v", "libx264",
        "-preset", "medium",
        "-crf", "23",
        "-r", "30",
        "-vsync", "cfr",
        "-async", "1",
        "-map", "0:v:0",
        "-map", "0:a:0",
        str(out_path),
    ]


def build_probe_cmd(path: Path) -> list[str]:
    return [
        "ffprobe", "-v", "error",
        "-print_format", "json",
        "-show_format",
        str(path),
    ]


def _escape_filter_path(value: str) -> str:
    return (
        value.replace("\\", r"\\")
        .replace(":", r"\:")
        .replace(",", r"\,")
        .replace("'", r"\'")
    )


# ---------------------------------------------------------------------------
# Chunk planning
# ---------------------------------------------------------------------------


def plan_chunks(total_duration_s: float, file_size: int) -> list[AudioChunk]:
    """Decide the chunk windows for an audio file.

    WHY: Each chunk must stay under the upload cap, and neighbouring chunks
    overlap so a word cut in half at one boundary is heard whole in the
    other. The aligner removes the resulting duplicates.

    HOW: Small files are one chunk. Otherwise the window length scales with
    the total duration (a tenth of it, clamped to 2..5 minutes); each chunk
    covers one window plus the overlap, and chunk starts advance by one
    window.

    Args:
        total_duration_s: Audio duration in seconds.
        file_size: Audio file size in bytes.

    Returns:
        Chunks in ascending start order.
    """
    if file_size <= MAX_UPLOAD_BYTES:
        return [AudioChunk(start_ms=0, duration_ms=seconds_to_ms(total_duration_s))]

    window = min(MAX_CHUNK_S, max(MIN_CHUNK_S, total_duration_s / 10.0))
    chunks = []
    start = 0.0
    while start < total_duration_s:
        duration = min(window + CHUNK_OVERLAP_S, total_duration_s - start)
        chunks.append(AudioChunk(start_ms=seconds_to_ms(start), duration_ms=seconds_to_ms(duration)))
        start += window
    return chunks


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        raise MediaError(
            "Missing required dependency '{}'. Install it and try again.".format(cmd[0])
        ) from None
    if proc.returncode != 0:
        raise MediaError(
            "{} failed (exit {}): {}".format(
                cmd[0], proc.returncode, (proc.stderr or "").strip()[-_STDERR_TAIL:]
            )
        )
    return proc


def extract_audio(video_path: Path, out_path: Path) -> Path:
    """Extract the audio track as mono 16 kHz WAV."""
    _run(build_extract_cmd(video_path, out_path))
    logger.info("Extracted audio to %s", out_path)
    return out_path


def probe_duration(path: Path) -> float:
    """Return the media duration in seconds as reported by ffprobe.

    RULES:
    - Raises MediaError if ffprobe fails or reports no usable duration
    """
    proc = _run(build_probe_cmd(path))
    try:
        return float(json.loads(proc.stdout)["format"]["duration"])
    except (ValueError, KeyError, TypeError):
        raise MediaError("ffprobe reported no duration for {}".format(path)) from None


def split_audio(audio_path: Path, work_dir: Path) -> list[tuple[AudioChunk, Path]]:
    """Cut an audio file into upload-sized, overlapping chunk files.

    RULES:
    - A single-chunk plan reuses audio_path instead of copying it
    - Chunk files are written to work_dir as chunk-<n>.wav
    - Returned pairs are in ascending start order
    """
    duration = probe_duration(audio_path)
    plan = plan_chunks(duration, audio_path.stat().st_size)
    if len(plan) == 1:
        return [(plan[0], audio_path)]

    logger.info("Splitting %.1fs of audio into %d chunks", duration, len(plan))
    chunks = []
    for index, chunk in enumerate(plan):
        chunk_path = work_dir / "chunk-{}.wav".format(index)
        _run(build_chunk_cmd(audio_path, chunk, chunk_path))
        chunks.append((chunk, chunk_path))
    return chunks


def burn_subtitles(video_path: Path, srt_path: Path, out_path: Path) -> Path:
    """Re-encode the video with the SRT rendered onto the picture."""
    _run(build_burn_cmd(video_path, srt_path, out_path))
    logger.info("Burned subtitles into %s", out_path)
    return out_path
