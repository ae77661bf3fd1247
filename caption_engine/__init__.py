"""Caption engine: coarse speech segments in, readable subtitle cues out.

WHY: Speech oracles time whole sentences, not words, and those timestamps
drift. This package turns such segments into non-overlapping SRT cues that
respect duration, word-count, line-length and reading-speed limits and end
at natural break points. It has no I/O and no global state, so the app layer
(API client, ffmpeg, HTTP server) can drive it with any configuration.

HOW: The public entry points are build_captions() and format_srt(). Both
deep-copy the constraint dict, then run dedupe → word timing → segmentation
(with break-point lookahead and line formatting) → repair, and format_srt()
finally encodes SRT. translate_captions() is the optional async step that
rewrites cue text through a translation oracle.

RULES:
- build_captions() / format_srt() are the public API for producing cues.
- segments are RawSegment objects in source time (see align_chunk_segments
  for chunk-relative input).
- Never mutate CAPTION_CONSTRAINTS; pass a modified copy as `config`.
- Python 3.9 compatible (no slots=True, no match/case, no X | Y unions).
"""

import copy
from typing import Dict, Iterable, List, Optional

from .align import align_chunk_segments, dedupe_segments
from .core import (
    estimate_word_timings,
    find_break_points,
    format_caption_text,
    segment_words,
)
from .models import AudioChunk, Caption, RawSegment, WordTiming
from .presets import CAPTION_CONSTRAINTS
from .repair import repair_captions
from .srt import generate_srt, parse_srt
from .translate import TranslationOracle, translate_captions

__all__ = [
    "build_captions",
    "format_srt",
    "align_chunk_segments",
    "dedupe_segments",
    "estimate_word_timings",
    "find_break_points",
    "format_caption_text",
    "segment_words",
    "repair_captions",
    "generate_srt",
    "parse_srt",
    "translate_captions",
    "TranslationOracle",
    "AudioChunk",
    "Caption",
    "RawSegment",
    "WordTiming",
    "CAPTION_CONSTRAINTS",
]


def build_captions(
    segments: Iterable[RawSegment],
    config: Optional[Dict] = None,
) -> List[Caption]:
    """Turn transcription segments into repaired caption cues.

    WHY: Callers (app pipeline, CLI, tests) need one call that runs the whole
    engine in the right order with one consistent constraint set.

    HOW: Copies the config, drops blank and overlapping segments, expands
    each segment into word timings, segments the word stream into cues, and
    runs the repair pass.

    RULES:
    - If config is given it replaces CAPTION_CONSTRAINTS entirely; an optional
      "preserve_duration" key is forwarded to repair_captions().
    - Returns [] when no segment yields any words.

    Args:
        segments: RawSegment objects in source time.
        config: Optional constraint dict.

    Returns:
        Repaired cues in display order.
    """
    cfg = copy.deepcopy(config if config is not None else CAPTION_CONSTRAINTS)

    words = []  # type: List[WordTiming]
    for segment in dedupe_segments(segments):
        words.extend(estimate_word_timings(segment))

    if not words:
        return []

    captions = segment_words(words, cfg)
    return repair_captions(
        captions, cfg, preserve_duration=bool(cfg.get("preserve_duration", False))
    )


def format_srt(
    segments: Iterable[RawSegment],
    config: Optional[Dict] = None,
) -> str:
    """Build captions from segments and return them as an SRT string.

    Returns an empty string if no cue could be built.
    """
    return generate_srt(build_captions(segments, config))
