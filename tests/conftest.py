"""Shared test fixtures for the subtitle generator test suite.

WHY: The engine, pipeline and server tests all need the same building
blocks: a fresh constraint dict, word streams with predictable timing, and
a stand-in for the Groq client that never touches the network.

HOW: Plain helper functions build WordTiming and Caption lists; pytest
fixtures hand out a deep copy of CAPTION_CONSTRAINTS and a FakeGroqClient
that records every call and answers from canned segments.

RULES:
- Fixtures never return shared mutable objects; each test gets its own copy.
- FakeGroqClient implements the same async methods as GroqClient.
- No fixture reads .env or calls the real API.
"""

import copy
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from caption_engine import CAPTION_CONSTRAINTS, Caption, RawSegment, WordTiming
from subtitle_generator.api.models import TranscriptionResult


def make_words(texts: Sequence[str], start: int = 0, width: int = 500, gap: int = 0) -> List[WordTiming]:
    """Build contiguous (or evenly spaced) WordTiming objects."""
    words = []  # type: List[WordTiming]
    t = start
    for text in texts:
        words.append(WordTiming(word=text, start_ms=t, end_ms=t + width))
        t += width + gap
    return words


def make_captions(spans: Sequence[Tuple[int, int]], prefix: str = "cue") -> List[Caption]:
    """Build one Caption per (start_ms, end_ms) pair with numbered text."""
    return [
        Caption(start_ms=start, end_ms=end, text="{} {}".format(prefix, i))
        for i, (start, end) in enumerate(spans, 1)
    ]


class FakeGroqClient:
    """In-memory replacement for GroqClient.

    transcribe() and translate_direct() answer with the next canned segment
    list; translate_batch() upper-cases every "[N] text" line it receives.
    """

    def __init__(self, segments: Optional[List[List[RawSegment]]] = None, fail_with=None):
        self._segments = list(segments or [])
        self._fail_with = fail_with
        self.calls = []  # type: List[Tuple[str, Dict]]

    async def transcribe(self, audio, language=None, quality="standard"):
        self.calls.append(("transcribe", {"audio": audio, "language": language, "quality": quality}))
        return self._next()

    async def translate_direct(self, audio):
        self.calls.append(("translate_direct", {"audio": audio}))
        return self._next()

    async def translate_batch(self, text, target_language):
        self.calls.append(("translate_batch", {"text": text, "target_language": target_language}))
        return text.upper()

    def _next(self) -> TranscriptionResult:
        if self._fail_with is not None:
            raise self._fail_with
        segments = self._segments.pop(0) if self._segments else []
        return TranscriptionResult(text=" ".join(s.text for s in segments), segments=segments)

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def config():
    """A private copy of the default caption constraints."""
    return copy.deepcopy(CAPTION_CONSTRAINTS)


@pytest.fixture
def fake_client():
    """A FakeGroqClient with two short sentences in one chunk."""
    return FakeGroqClient(segments=[[
        RawSegment(text="Hello there, and welcome.", start_ms=0, end_ms=2500),
        RawSegment(text="Today we talk about subtitles.", start_ms=3000, end_ms=6000),
    ]])
