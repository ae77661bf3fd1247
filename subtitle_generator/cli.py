"""Command-line interface for the subtitle generator.

WHY: Users need a simple way to subtitle a video from the terminal. The CLI
wires together the whole run (file validation, audio extraction and
chunking, Groq transcription, caption building, optional translation and
burn-in, file saving) behind a single command.

HOW: Uses argparse to accept an input file, language/translation/quality
options and an output path. Runs the async pipeline via asyncio.run() inside
a TemporaryDirectory that holds every intermediate file. Status messages go
to stderr; the result is saved next to the source unless --output is given.
With --from-srt the input is an existing SubRip file that is only
translated, skipping ffmpeg and transcription.

RULES:
- Positional argument: input video/audio file (or .srt with --from-srt)
- Validates the extension against SUPPORTED_MEDIA_FORMATS before any API call
- Default output: {stem}.srt, or {stem}-subtitled.mp4 with --embed
- --from-srt requires --translate-to and writes {stem}.{lang}.srt by default
- Status output goes to stderr (not stdout)
- Exit codes: 0 success, 1 error ("Error: <message>" on stderr), 130 Ctrl-C
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from caption_engine import generate_srt, parse_srt, translate_captions
from subtitle_generator.api.client import GroqClient
from subtitle_generator.config import SUPPORTED_MEDIA_FORMATS, load_caption_config
from subtitle_generator.pipeline import (
    QUALITY_CHOICES,
    SubtitleOptions,
    generate_subtitles,
)


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.

    RULES:
    - All status messages go to stderr
    - Always flush after writing
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _default_output(input_path: Path, options: SubtitleOptions, from_srt: bool) -> Path:
    """Pick the output path next to the input file.

    RULES:
    - Transcription run: {stem}.srt
    - Embedded run: {stem}-subtitled.mp4
    - SRT translation run: {stem}.{translate_to}.srt
    """
    stem = input_path.stem
    if from_srt:
        return input_path.with_name("{}.{}.srt".format(stem, options.translate_to))
    if options.output_format == "embedded":
        return input_path.with_name("{}-subtitled.mp4".format(stem))
    return input_path.with_name("{}.srt".format(stem))


async def _translate_srt(input_path: Path, output_path: Path, options: SubtitleOptions) -> None:
    """Translate an existing SRT file without touching its timings."""
    _status("Reading {}...".format(input_path.name))
    captions = parse_srt(input_path.read_text(encoding="utf-8"))
    if not captions:
        _fail("No subtitle cues found in {}".format(input_path))

    _status("Translating {} cue(s) to {}...".format(len(captions), options.translate_to))
    async with GroqClient() as client:
        translated = await translate_captions(captions, options.translate_to, client)

    output_path.write_text(generate_srt(translated), encoding="utf-8")
    _status("Saved: {}".format(output_path))


async def _transcribe(input_path: Path, output_path: Path, options: SubtitleOptions) -> None:
    """Run the full subtitle pipeline and save its output."""
    config = load_caption_config()

    _status("Generating subtitles for {}...".format(input_path.name))
    with tempfile.TemporaryDirectory(prefix="subtitle-generator-") as tmp:
        async with GroqClient() as client:
            output = await generate_subtitles(
                client, input_path, options, Path(tmp), config=config
            )

    result = output.result
    _status("  {} segment(s) -> {} caption(s)".format(result.segment_count, len(result.captions)))

    if output.video_bytes is not None:
        output_path.write_bytes(output.video_bytes)
    else:
        output_path.write_text(result.srt, encoding="utf-8")

    _status("")
    _status("Done! Saved {}".format(output_path))


def _run(args: argparse.Namespace) -> None:
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    ext = input_path.suffix.lower()
    if args.from_srt:
        if ext != ".srt":
            _fail("--from-srt expects an .srt file, got '{}'".format(ext))
        if not args.translate_to or args.translate_to == "none":
            _fail("--from-srt requires --translate-to")
    elif ext not in SUPPORTED_MEDIA_FORMATS:
        _fail(
            "Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_MEDIA_FORMATS))
            )
        )

    try:
        options = SubtitleOptions(
            source_language=args.language,
            translate_to=args.translate_to,
            quality=args.quality,
            output_format="embedded" if args.embed else "srt",
        )
    except ValueError as e:
        _fail(str(e))

    output_path = (
        Path(args.output).resolve() if args.output
        else _default_output(input_path, options, args.from_srt)
    )

    try:
        if args.from_srt:
            asyncio.run(_translate_srt(input_path, output_path, options))
        else:
            asyncio.run(_transcribe(input_path, output_path, options))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except Exception as e:
        _fail(str(e))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="subtitle-generator",
        description="Generate SRT subtitles for a video with Groq Whisper, "
                    "optionally translated or burned into the video.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the video or audio file (or an .srt file with --from-srt).",
    )

    parser.add_argument(
        "--language",
        default="auto",
        help="Source language ISO 639-1 code, or 'auto' to detect (default: %(default)s).",
    )

    parser.add_argument(
        "--translate-to",
        default=None,
        help="Target language ISO 639-1 code for the subtitles (default: no translation).",
    )

    parser.add_argument(
        "--quality",
        choices=QUALITY_CHOICES,
        default="standard",
        help="Transcription model quality (default: %(default)s).",
    )

    parser.add_argument(
        "--embed",
        action="store_true",
        help="Burn the subtitles into a copy of the video instead of writing an .srt.",
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Output file path (default: next to the input file).",
    )

    parser.add_argument(
        "--from-srt",
        action="store_true",
        help="Treat the input as an existing .srt file and only translate it.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    _run(args)


if __name__ == "__main__":
    main()
