"""Groq audio API response dataclasses.

WHY: The Groq (OpenAI-compatible) audio endpoints return verbose_json
objects with the full text, the detected language, the audio duration and a
list of timed segments. Typed dataclasses make that structure explicit and
convert it to the engine's RawSegment at one place.

HOW: TranscriptionResult.from_dict parses the raw response. Segment times
arrive as fractional seconds and are converted to integer milliseconds via
RawSegment.from_seconds.

RULES:
- Segments are chunk-relative; the pipeline shifts them by the chunk offset
- Segments with blank text are kept here and dropped by the aligner
- language and duration are None when the endpoint omits them
- A response without "segments" yields an empty segment list
"""

from __future__ import annotations

from dataclasses import dataclass, field

from caption_engine.models import RawSegment


@dataclass
class TranscriptionResult:
    """Parsed verbose_json response of /audio/transcriptions or /audio/translations.

    RULES:
    - text: the full transcript text (convenience field, not used for captions)
    - segments: RawSegment list in chunk-relative milliseconds
    - language: language name or code reported by the model, if any
    - duration: audio duration in seconds, if reported
    """

    text: str
    segments: list[RawSegment] = field(default_factory=list)
    language: str | None = None
    duration: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptionResult:
        """Parse a TranscriptionResult from a raw API response dict.

        RULES:
        - Missing or null start defaults to 0.0, missing or null end to the start
        - Non-dict entries in "segments" are skipped
        """
        segments = []
        for raw in data.get("segments") or []:
            if not isinstance(raw, dict):
                continue
            start = float(raw.get("start") or 0.0)
            end = raw.get("end")
            end = start if end is None else float(end)
            segments.append(RawSegment.from_seconds(str(raw.get("text") or ""), start, end))

        duration = data.get("duration")
        return cls(
            text=str(data.get("text") or ""),
            segments=segments,
            language=data.get("language"),
            duration=float(duration) if duration is not None else None,
        )
