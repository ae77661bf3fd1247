"""Merge segments recovered from overlapping audio chunks into one timeline.

WHY: Long audio is transcribed in chunks that overlap by a few seconds so no
word is lost at a cut. The overlap means the same speech is usually
transcribed twice, once at the tail of one chunk and once at the head of
the next. Those duplicates must go before word timing and segmentation.

HOW: Segments are first moved from chunk-relative to source time using the
chunk's start offset. They are then sorted by start and accepted greedily:
a segment whose interval overlaps an already accepted one is dropped.

RULES:
- Interval overlap is the only duplicate test. Text is not compared.
- Ties are resolved by sort stability: the earlier start wins, and for equal
  starts the segment that arrived first (earlier chunk) wins.
- Segments with blank text are dropped.
- Touching intervals (a.end == b.start) do not overlap.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from .models import AudioChunk, RawSegment

logger = logging.getLogger(__name__)


def dedupe_segments(segments: Iterable[RawSegment]) -> List[RawSegment]:
    """Sort segments by start and drop blanks and overlapping duplicates.

    Args:
        segments: Segments already expressed in source time.

    Returns:
        A new list, sorted by start_ms, with no two intervals overlapping.
    """
    ordered = sorted(segments, key=lambda s: s.start_ms)
    accepted = []  # type: List[RawSegment]

    for segment in ordered:
        if not segment.text.strip():
            continue
        overlaps = any(
            segment.start_ms < kept.end_ms and segment.end_ms > kept.start_ms
            for kept in accepted
        )
        if overlaps:
            continue
        accepted.append(segment)

    dropped = len(ordered) - len(accepted)
    if dropped:
        logger.debug("Dropped %d blank or overlapping segment(s)", dropped)
    return accepted


def align_chunk_segments(
    chunk_results: Iterable[Tuple[AudioChunk, Sequence[RawSegment]]],
) -> List[RawSegment]:
    """Shift each chunk's segments onto the source timeline and dedupe them.

    Args:
        chunk_results: (chunk, segments) pairs, segment times relative to
            the chunk start.

    Returns:
        One ordered, non-overlapping segment list in source time.
    """
    shifted = []  # type: List[RawSegment]
    for chunk, segments in chunk_results:
        shifted.extend(segment.shifted(chunk.start_ms) for segment in segments)
    return dedupe_segments(shifted)
