"""Core caption logic: word timing, break points, line formatting, segmentation.

WHY: Speech oracles return sentence-level segments with coarse timestamps.
Subtitles need short cues that fit on two lines, stay on screen long enough
to be read, and end at natural linguistic boundaries. This module turns the
former into the latter.

HOW: The pipeline has four stages:
  1. estimate_word_timings(): spreads a segment's time span over its words,
     weighted by character length.
  2. find_break_points(): flags word boundaries that are good places to cut
     (punctuation, conjunctions, prepositions).
  3. segment_words(): greedy forward scan that accumulates words into a cue
     and emits it as soon as any end-of-cue predicate holds.
  4. format_caption_text(): splits an emitted cue into at most two balanced
     lines.

RULES:
- ALL functions that need limits take an explicit `config` dict. No global
  state, so concurrent runs with different limits are safe.
- Word text is never modified; only cue boundaries and line breaks change.
- Times are integer milliseconds.
- Word timings are an estimate, not a measured alignment.
"""

import math
import re
from typing import Dict, List, Optional, Sequence, Set

from .models import Caption, RawSegment, WordTiming
from .presets import BREAK_AFTER_WORDS, BREAK_BEFORE_WORDS, LINE_BREAK_WORDS

# =============================================================================
# Text Utilities
# =============================================================================

NON_WORD_RE = re.compile(r"[^\w]")
SENT_PUNCT_RE = re.compile(r"[.!?]$")
CLAUSE_PUNCT_RE = re.compile(r"[,:;]$")
LINE_PUNCT_RE = re.compile(r"[,;:]$")


def word_weight(token: str) -> int:
    """Character count of a token once punctuation and symbols are removed."""
    return len(NON_WORD_RE.sub("", token))


def ends_sentence(word: str) -> bool:
    """True if the word ends with terminal punctuation (. ! ?)."""
    return bool(SENT_PUNCT_RE.search(word))


def ends_clause(word: str) -> bool:
    """True if the word ends with clause punctuation (, : ;)."""
    return bool(CLAUSE_PUNCT_RE.search(word))


# =============================================================================
# Word Timing Estimation
# =============================================================================

def estimate_word_timings(segment: RawSegment) -> List[WordTiming]:
    """Expand a coarse segment into per-word timings.

    WHY: The oracle only timestamps whole segments, but cue boundaries fall
    between words. Longer words take longer to say, so character length is a
    usable proxy for where each word sits inside the segment.

    HOW: Whitespace-tokenizes the text and weights each token by its length
    without punctuation. Word boundaries are placed at the cumulative weight
    fraction of the segment span, computed in integer milliseconds, so the
    words are contiguous and the last one ends exactly at segment.end_ms.

    RULES:
    - Returns [] for empty text or when every token weighs 0 ("...", "—").
    - word[i].end_ms == word[i + 1].start_ms for every i.
    - One WordTiming per token; token text is kept verbatim.
    - A segment with end before start is treated as zero-length.

    Args:
        segment: One shifted RawSegment.

    Returns:
        Ordered list of WordTiming covering [start_ms, end_ms].
    """
    tokens = segment.text.split()
    if not tokens:
        return []

    weights = [word_weight(t) for t in tokens]
    total = sum(weights)
    if total == 0:
        return []

    span = max(0, segment.end_ms - segment.start_ms)
    timings = []  # type: List[WordTiming]
    cumulative = 0
    current = segment.start_ms

    for token, weight in zip(tokens, weights):
        cumulative += weight
        boundary = segment.start_ms + (span * cumulative) // total
        timings.append(WordTiming(word=token, start_ms=current, end_ms=boundary))
        current = boundary

    return timings


# =============================================================================
# Break Point Detection
# =============================================================================

def find_break_points(words: Sequence[WordTiming]) -> Set[int]:
    """Flag the word boundaries that are linguistically valid cut points.

    Index i stands for the boundary between words[i - 1] and words[i].
    0 and len(words) are always included. For the boundaries in between the
    first matching rule wins:
      a. previous word ends a sentence (. ! ?)
      b. previous word ends a clause (, : ;)
      c. previous word is a conjunction ("and", "because", ...)
      d. current word is a preposition ("in", "with", ...) and i > 3
    """
    breaks = {0, len(words)}

    for i in range(1, len(words)):
        prev_word = words[i - 1].word.lower()
        current_word = words[i].word.lower()

        if ends_sentence(prev_word):
            breaks.add(i)
        elif ends_clause(prev_word):
            breaks.add(i)
        elif prev_word in BREAK_AFTER_WORDS:
            breaks.add(i)
        elif i > 3 and current_word in BREAK_BEFORE_WORDS:
            breaks.add(i)

    return breaks


# =============================================================================
# Line Formatting
# =============================================================================

def format_caption_text(text: str, config: Dict) -> str:
    """Split a cue's text into at most two balanced lines.

    WHY: A cue longer than one line must be broken somewhere. Breaking after
    a comma or before a new clause reads far better than a blind midpoint
    cut, but only if both lines still fit the line limit.

    HOW: Short cues (three words or fewer, or already within one line) come
    back unchanged. Otherwise the midpoint word index is ceil(n / 2), and the
    two words either side of it (offsets 0..2) are checked for a preferred
    anchor: a word ending in , ; : or one of LINE_BREAK_WORDS. The nearest
    anchor wins, midpoint-minus before midpoint-plus.

    RULES:
    - At most one "\\n" is inserted.
    - Preferred split → else midpoint split → else the unsplit text. A split
      is used only if both lines are within max_chars_per_line; an overlong
      single line is accepted rather than an invalid split.

    Args:
        text: Joined cue text.
        config: Constraint dict (uses max_chars_per_line).

    Returns:
        The cue text, possibly with one line break.
    """
    words = text.split()
    single = " ".join(words)
    max_chars = config["max_chars_per_line"]

    if len(words) <= 3 or len(single) <= max_chars:
        return single

    mid = int(math.ceil(len(words) / 2.0))
    preferred = _find_line_anchor(words, mid)

    for break_at in (preferred, mid):
        if break_at is None:
            continue
        line1 = " ".join(words[:break_at])
        line2 = " ".join(words[break_at:])
        if len(line1) <= max_chars and len(line2) <= max_chars:
            return "{}\n{}".format(line1, line2)

    return single


def _find_line_anchor(words: List[str], mid: int) -> Optional[int]:
    """Return the word index nearest mid that follows a natural anchor, or None."""
    for offset in range(3):
        for idx in (mid - offset, mid + offset):
            if 0 < idx < len(words):
                word = words[idx - 1].lower()
                if LINE_PUNCT_RE.search(word) or word in LINE_BREAK_WORDS:
                    return idx
    return None


# =============================================================================
# Segmentation
# =============================================================================

def segment_words(words: Sequence[WordTiming], config: Dict) -> List[Caption]:
    """Group a word stream into caption cues.

    WHY: Cues must respect hard limits (duration, word count, characters,
    reading speed) and should end where a viewer would expect a pause. A
    greedy forward scan is predictable and runs in linear time.

    HOW: Words are appended to a buffer one at a time. After each append the
    end-of-cue predicates are checked (see _should_emit). When one holds the
    buffer is joined, line-formatted and emitted as a Caption spanning from
    the first buffered word's start to the last buffered word's end, and the
    buffer starts over at the next word.

    RULES:
    - A cue is never empty; the last word always closes the final cue.
    - Natural-pause and lookahead predicates only apply when a next word
      exists.
    - The lookahead window is words[i - len(buffer) + 1 : i + lookahead_words],
      i.e. the current buffer plus a few words of look-ahead.

    Args:
        words: Ordered WordTiming stream (all segments, already aligned).
        config: Constraint dict.

    Returns:
        Unrepaired cues in time order.
    """
    if not words:
        return []

    captions = []  # type: List[Caption]
    buffer = []  # type: List[WordTiming]
    caption_start = words[0].start_ms
    last_index = len(words) - 1

    for i, word in enumerate(words):
        buffer.append(word)

        if _should_emit(words, i, buffer, caption_start, config):
            text = " ".join(w.word for w in buffer)
            captions.append(Caption(
                start_ms=caption_start,
                end_ms=buffer[-1].end_ms,
                text=format_caption_text(text, config),
            ))
            buffer = []
            if i < last_index:
                caption_start = words[i + 1].start_ms

    return captions


def _should_emit(
    words: Sequence[WordTiming],
    i: int,
    buffer: List[WordTiming],
    caption_start: int,
    config: Dict,
) -> bool:
    """Evaluate the end-of-cue predicates for the word just appended.

    The predicates are OR-ed; checking stops at the first one that holds.
    """
    word = words[i]
    text = " ".join(w.word for w in buffer)
    duration_ms = word.end_ms - caption_start
    count = len(buffer)

    if duration_ms >= config["max_duration_ms"]:
        return True
    if count >= config["max_words"]:
        return True
    if len(text) > config["max_chars_per_line"] * config["max_lines"]:
        return True

    # Reading time (ms) = chars / (chars per second) * 1000
    if len(text) * 1000 > config["reading_speed"] * duration_ms and count > config["min_words"]:
        return True

    if i == len(words) - 1:
        return True

    next_word = words[i + 1]
    if next_word.start_ms - word.end_ms > config["pause_threshold_ms"]:
        return True
    if ends_sentence(word.word):
        return True

    if count >= config["min_words"] and duration_ms >= config["min_duration_ms"]:
        window = words[i - count + 1:i + config["lookahead_words"]]
        if count in find_break_points(window):
            return True

    return False
