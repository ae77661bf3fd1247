"""CLI wrapper for the caption engine.

WHY: Transcripts already fetched from a speech service (or hand-written test
fixtures) should be convertible to SRT without going through the full
upload pipeline. This command does exactly that, offline.

HOW: Parses sys.argv for input path, output path and the optional
--preserve-duration flag, reads JSON, normalizes it into RawSegment objects
with parse_segments(), and delegates to format_srt().

RULES:
- Usage:
    caption-engine segments.json output.srt
    caption-engine segments.json            (outputs to stdout)
    cat segments.json | caption-engine - output.srt
- Input is either a list of {"text", "start", "end"} objects (seconds) or a
  Whisper verbose_json object with a "segments" list.
- Exit codes: 0 = success, 1 = error.
- Progress messages go to stderr; SRT content goes to stdout (if no output file).
"""

import copy
import json
import sys
from typing import Any, List, Optional

from .models import RawSegment
from .presets import CAPTION_CONSTRAINTS
from . import format_srt

HELP_TEXT = """caption-engine: segment transcription JSON into SRT captions

Usage:
    caption-engine segments.json output.srt
    caption-engine segments.json  # outputs to stdout
    cat segments.json | caption-engine - output.srt

Options:
    --preserve-duration   keep every shifted cue at least the minimum duration
"""


def parse_segments(data: Any) -> List[RawSegment]:
    """Normalize parsed JSON into RawSegment objects.

    Accepts a list of segment dicts or an object with a "segments" list.
    Entries without text are skipped; a missing end defaults to the start.
    """
    if isinstance(data, dict):
        data = data.get("segments") or []
    if not isinstance(data, list):
        return []

    segments = []  # type: List[RawSegment]
    for item in data:
        if not isinstance(item, dict):
            continue
        text = str(item.get("text") or "").strip()
        if not text:
            continue
        start = float(item.get("start") or 0.0)
        end = item.get("end")
        end = start if end is None else float(end)
        segments.append(RawSegment.from_seconds(text, start, end))
    return segments


def main(argv: Optional[List[str]] = None) -> None:
    """Run the caption engine CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    if argv is None:
        argv = sys.argv[1:]

    args = list(argv)

    if not args or args[0] in ("-h", "--help"):
        print(HELP_TEXT)
        sys.exit(0)

    config = copy.deepcopy(CAPTION_CONSTRAINTS)
    positional = []  # type: List[str]
    for arg in args:
        if arg == "--preserve-duration":
            config["preserve_duration"] = True
        else:
            positional.append(arg)

    input_path = positional[0] if positional else "-"
    output_path = positional[1] if len(positional) > 1 else None

    if input_path == "-":
        raw = sys.stdin.read()
    else:
        with open(input_path, "r", encoding="utf-8") as f:
            raw = f.read()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        print("Error: Could not parse JSON input: {}".format(e), file=sys.stderr)
        sys.exit(1)

    segments = parse_segments(data)
    if not segments:
        print("Error: No segments found in input", file=sys.stderr)
        sys.exit(1)

    srt = format_srt(segments, config)

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(srt)
        print(
            "Wrote captions for {} segment(s) to {}".format(len(segments), output_path),
            file=sys.stderr,
        )
    else:
        print(srt)


if __name__ == "__main__":
    main()
