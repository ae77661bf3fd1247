"""Data models for the caption engine.

WHY: Every stage of the engine hands its output to the next one. Small,
explicit dataclasses make the hand-off contract visible: the oracle's coarse
segments, the estimated per-word timings, the finished caption cues, and the
offset metadata of the audio chunks the segments came from.

HOW: Four dataclasses. RawSegment and WordTiming are frozen because no stage
may edit another stage's output. Caption is mutable because the repair pass
adjusts cue boundaries in place. All times are integer milliseconds; the
only float-to-integer conversion is seconds_to_ms(), used where oracle
output enters the engine.

RULES:
- Times are integer milliseconds, never float seconds.
- RawSegment.shifted() returns a new segment; segments are never edited.
- Caption.text may contain at most one "\\n" line break.
- Python 3.9 compatible (no slots=True, no match/case, no X | Y unions).
"""

import math
from dataclasses import dataclass


def seconds_to_ms(seconds: float) -> int:
    """Convert fractional seconds from the oracle to integer milliseconds.

    Sub-millisecond parts are truncated, the same way an SRT timestamp drops
    them. The 1e-6 nudge keeps a product that lands a hair below a whole
    millisecond in float arithmetic from losing that millisecond.
    """
    return int(math.floor(float(seconds) * 1000 + 1e-6))


def ms_to_seconds(ms: int) -> float:
    """Convert integer milliseconds back to fractional seconds."""
    return ms / 1000.0


@dataclass(frozen=True)
class RawSegment:
    """A coarse transcription unit (sentence-ish) returned by the speech oracle.

    Attributes:
        text: The recognised text, untouched.
        start_ms: Segment start. Chunk-relative until shifted.
        end_ms: Segment end. Chunk-relative until shifted.
    """
    text: str
    start_ms: int
    end_ms: int

    @classmethod
    def from_seconds(cls, text: str, start: float, end: float) -> "RawSegment":
        """Build a segment from oracle-style fractional seconds."""
        return cls(text=text, start_ms=seconds_to_ms(start), end_ms=seconds_to_ms(end))

    def shifted(self, offset_ms: int) -> "RawSegment":
        """Return a copy moved by a chunk's start offset."""
        return RawSegment(
            text=self.text,
            start_ms=self.start_ms + offset_ms,
            end_ms=self.end_ms + offset_ms,
        )


@dataclass(frozen=True)
class WordTiming:
    """One word with an estimated start and end.

    Produced only by estimate_word_timings(); start_ms <= end_ms always holds.
    """
    word: str
    start_ms: int
    end_ms: int


@dataclass
class Caption:
    """A single subtitle cue.

    Attributes:
        start_ms: Display start.
        end_ms: Display end.
        text: Cue text, with at most one internal "\\n".
    """
    start_ms: int
    end_ms: int
    text: str

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class AudioChunk:
    """Offset metadata for one slice of the source audio.

    The chunk's audio bytes belong to the caller; the engine only needs to
    know where the slice sits on the source timeline.
    """
    start_ms: int
    duration_ms: int

    @property
    def end_ms(self) -> int:
        return self.start_ms + self.duration_ms
