"""Caption constraints and linguistic word sets.

WHY: Readability limits (duration, word count, line length, reading speed,
gaps) decide where cues start and end. Keeping them in one importable dict
lets the app layer externalize them as configuration while the engine stays
free of global state: every engine function receives the dict explicitly.

HOW: CAPTION_CONSTRAINTS is a plain dict. Durations are stored as integer
milliseconds to match the engine's time representation. The word sets drive
break-point detection and line splitting.

RULES:
- CAPTION_CONSTRAINTS is a frozen constant. Callers must deep-copy before
  changing it (build_captions() and load_caption_config() do this).
- A run reads the dict; nothing writes to it mid-run.
- The word sets are English; matching is done on lowercased words.
"""

from typing import Dict, FrozenSet

CAPTION_CONSTRAINTS: Dict = {
    "min_duration_ms": 1000,
    "max_duration_ms": 7000,
    "min_words": 1,
    "max_words": 12,
    "max_chars_per_line": 42,
    "max_lines": 2,
    "min_gap_ms": 100,
    "reading_speed": 15.0,       # characters per second
    "pause_threshold_ms": 500,   # silence that ends a cue on its own
    "lookahead_words": 5,        # words past the current one seen by the break detector
}

# A cue or line may end right after one of these.
BREAK_AFTER_WORDS: FrozenSet[str] = frozenset({
    "and", "but", "or", "so", "because", "when", "while", "if",
    "although", "since", "unless",
})

# A cue may end right before one of these, once it has a few words.
BREAK_BEFORE_WORDS: FrozenSet[str] = frozenset({
    "in", "on", "at", "to", "for", "with", "by", "from", "about",
})

# Line-split anchors: the first line may end with one of these.
LINE_BREAK_WORDS: FrozenSet[str] = frozenset({"and", "but", "or", "with", "to"})
