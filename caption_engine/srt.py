"""SubRip (.srt) encoding and decoding.

WHY: SRT is the one wire format the engine must reproduce exactly. Players
and the ffmpeg subtitles filter both read it, so index numbering, timestamp
padding and blank-line separation have to be right.

HOW: generate_srt() renders each cue as index, "start --> end" and text,
followed by a newline, and joins cues with one more newline so a blank line
separates them. Timestamps come straight from integer milliseconds, so
sub-millisecond truncation never happens here. parse_srt() reads files back
through the srt library, tolerating CRLF line endings and extra blank lines.

RULES:
- Indices are 1-based and follow list order.
- Timestamp format is HH:MM:SS,mmm, zero padded; hours may exceed 99.
- Negative times are clamped to 00:00:00,000.
- Cue text is stripped of surrounding whitespace; internal "\\n" is kept.
"""

from datetime import timedelta
from typing import List

import srt

from .models import Caption

ONE_MS = timedelta(milliseconds=1)


def ms_to_srt_time(ms: int) -> str:
    """Convert integer milliseconds to an SRT timestamp: HH:MM:SS,mmm"""
    ms = max(0, int(ms))
    hours, rest = divmod(ms, 3600000)
    minutes, rest = divmod(rest, 60000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, secs, millis)


def generate_srt(captions: List[Caption]) -> str:
    """Render a cue list as SRT text.

    Args:
        captions: Repaired cues in display order.

    Returns:
        Complete SRT file content ("" for an empty list).
    """
    blocks = []
    for index, caption in enumerate(captions, 1):
        blocks.append("{}\n{} --> {}\n{}\n".format(
            index,
            ms_to_srt_time(caption.start_ms),
            ms_to_srt_time(caption.end_ms),
            caption.text.strip(),
        ))
    return "\n".join(blocks)


def parse_srt(content: str) -> List[Caption]:
    """Parse SRT text back into Caption objects.

    WHY: Existing subtitle files can be fed to the translation step, and
    encoded output can be checked against what went in.

    HOW: srt.parse() does the block grammar. Unparseable stretches between
    cues are skipped (the library logs a warning for each). Timedelta
    boundaries become integer milliseconds and cue text is stripped.

    Args:
        content: SRT file content.

    Returns:
        Cues in file order.
    """
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    return [
        Caption(
            start_ms=sub.start // ONE_MS,
            end_ms=sub.end // ONE_MS,
            text=sub.content.strip(),
        )
        for sub in srt.parse(content, ignore_errors=True)
    ]
