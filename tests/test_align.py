"""Unit tests for chunk alignment and segment deduplication.

WHY: Overlapping chunks transcribe the same speech twice. The aligner must
move every segment onto the source timeline and keep exactly one copy,
using interval overlap alone.

RULES:
- Chunk-relative times are shifted by AudioChunk.start_ms.
- Touching intervals are not duplicates.
"""

from caption_engine import AudioChunk, RawSegment, align_chunk_segments, dedupe_segments


def _intervals(segments):
    return [(s.start_ms, s.end_ms) for s in segments]


class TestAlignChunkSegments:
    """align_chunk_segments() over a 15 second overlap window."""

    def test_overlap_duplicate_is_dropped(self):
        first = AudioChunk(start_ms=0, duration_ms=315000)
        second = AudioChunk(start_ms=300000, duration_ms=315000)
        result = align_chunk_segments([
            (first, [
                RawSegment("opening", 0, 4000),
                RawSegment("overlap tail", 298000, 303000),
            ]),
            (second, [
                RawSegment("overlap head", 0, 3000),
                RawSegment("after", 3000, 6000),
            ]),
        ])
        assert [s.text for s in result] == ["opening", "overlap tail", "after"]
        assert _intervals(result) == [(0, 4000), (298000, 303000), (303000, 306000)]

    def test_no_overlapping_intervals_remain(self):
        first = AudioChunk(start_ms=0, duration_ms=135000)
        second = AudioChunk(start_ms=120000, duration_ms=135000)
        first_segments = [RawSegment("a{}".format(i), i * 5000, i * 5000 + 4500) for i in range(27)]
        second_segments = [RawSegment("b{}".format(i), i * 5000 + 1000, i * 5000 + 5500) for i in range(27)]
        result = align_chunk_segments([(first, first_segments), (second, second_segments)])

        for prev, cur in zip(result, result[1:]):
            assert prev.end_ms <= cur.start_ms

        # b0..b2 collide with a24..a26; every other segment survives
        assert len(result) == 27 + 24
        assert sum(s.end_ms - s.start_ms for s in result) == (27 + 24) * 4500

    def test_shift_applies_chunk_offset(self):
        result = align_chunk_segments([(AudioChunk(60000, 30000), [RawSegment("x", 500, 1500)])])
        assert _intervals(result) == [(60500, 61500)]


class TestDedupeSegments:
    """dedupe_segments() on source-time segments."""

    def test_sorts_by_start(self):
        result = dedupe_segments([RawSegment("late", 5000, 6000), RawSegment("early", 0, 1000)])
        assert [s.text for s in result] == ["early", "late"]

    def test_equal_start_keeps_first_arrival(self):
        result = dedupe_segments([RawSegment("chunk one", 1000, 2000), RawSegment("chunk two", 1000, 2500)])
        assert [s.text for s in result] == ["chunk one"]

    def test_blank_text_dropped(self):
        result = dedupe_segments([RawSegment("   ", 0, 1000), RawSegment("kept", 1000, 2000)])
        assert [s.text for s in result] == ["kept"]

    def test_text_is_not_compared(self):
        result = dedupe_segments([RawSegment("same", 0, 1000), RawSegment("same", 1000, 2000)])
        assert len(result) == 2
