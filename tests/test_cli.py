"""Tests for the caption-engine and subtitle-generator command lines.

WHY: Both CLIs are thin, but their exit codes, default output paths and
input validation are what users and scripts depend on.

HOW: main() is called with explicit argv. SystemExit is caught with
pytest.raises; GroqClient and generate_subtitles are patched so no network
or ffmpeg call happens.

RULES:
- Output files are written only under tmp_path.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from caption_engine import Caption, generate_srt
from caption_engine.cli import main as engine_main
from caption_engine.cli import parse_segments
from subtitle_generator.cli import build_parser
from subtitle_generator.cli import main as generator_main
from subtitle_generator.pipeline import SubtitleOutput, SubtitleResult

from tests.conftest import FakeGroqClient


class _FakeClientContext(FakeGroqClient):
    instances = []

    def __init__(self, *args, **kwargs):
        super().__init__()
        _FakeClientContext.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


class TestParseSegments:
    """caption_engine.cli.parse_segments() input shapes."""

    def test_list_of_segments(self):
        segments = parse_segments([{"text": "hi", "start": 0.5, "end": 1.25}])
        assert [(s.text, s.start_ms, s.end_ms) for s in segments] == [("hi", 500, 1250)]

    def test_verbose_json_object(self):
        data = {"text": "x", "segments": [{"text": " a ", "start": 0, "end": 1}, {"text": ""}]}
        assert [s.text for s in parse_segments(data)] == ["a"]

    def test_null_times_default_to_start(self):
        segments = parse_segments([
            {"text": "a", "start": None, "end": None},
            {"text": "b", "start": 2.0, "end": None},
            {"text": None, "start": 3.0, "end": 4.0},
        ])
        assert [(s.text, s.start_ms, s.end_ms) for s in segments] == [("a", 0, 0), ("b", 2000, 2000)]

    def test_unexpected_shape(self):
        assert parse_segments("nope") == []


class TestCaptionEngineCli:
    """caption-engine main()."""

    def test_writes_srt_file(self, tmp_path):
        src = tmp_path / "segments.json"
        out = tmp_path / "out.srt"
        src.write_text(json.dumps([{"text": "hello world today", "start": 0.0, "end": 3.0}]))
        engine_main([str(src), str(out)])
        assert out.read_text(encoding="utf-8") == "1\n00:00:00,000 --> 00:00:03,000\nhello world today\n"

    def test_prints_to_stdout(self, tmp_path, capsys):
        src = tmp_path / "segments.json"
        src.write_text(json.dumps({"segments": [{"text": "Hi there.", "start": 1.0, "end": 2.5}]}))
        engine_main([str(src)])
        assert "00:00:01,000 --> 00:00:02,500" in capsys.readouterr().out

    def test_invalid_json_exits_1(self, tmp_path):
        src = tmp_path / "bad.json"
        src.write_text("{not json")
        with pytest.raises(SystemExit) as excinfo:
            engine_main([str(src)])
        assert excinfo.value.code == 1

    def test_no_segments_exits_1(self, tmp_path, capsys):
        src = tmp_path / "empty.json"
        src.write_text("[]")
        with pytest.raises(SystemExit) as excinfo:
            engine_main([str(src)])
        assert excinfo.value.code == 1
        assert "No segments" in capsys.readouterr().err

    def test_help_exits_0(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            engine_main(["--help"])
        assert excinfo.value.code == 0
        assert "Usage" in capsys.readouterr().out


class TestSubtitleGeneratorParser:
    """subtitle-generator argument defaults."""

    def test_defaults(self):
        args = build_parser().parse_args(["video.mp4"])
        assert args.language == "auto"
        assert args.translate_to is None
        assert args.quality == "standard"
        assert args.embed is False
        assert args.from_srt is False

    def test_quality_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["video.mp4", "--quality", "ultra"])


class TestSubtitleGeneratorCli:
    """subtitle-generator main() runs."""

    def test_missing_file_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            generator_main([str(tmp_path / "missing.mp4")])
        assert excinfo.value.code == 1
        assert "Error: File not found" in capsys.readouterr().err

    def test_unsupported_type_exits_1(self, tmp_path, capsys):
        doc = tmp_path / "notes.txt"
        doc.write_text("hi")
        with pytest.raises(SystemExit) as excinfo:
            generator_main([str(doc)])
        assert excinfo.value.code == 1
        assert "Unsupported file type" in capsys.readouterr().err

    def test_from_srt_requires_target(self, tmp_path, capsys):
        srt = tmp_path / "talk.srt"
        srt.write_text(generate_srt([Caption(0, 1000, "Hello")]), encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            generator_main([str(srt), "--from-srt"])
        assert excinfo.value.code == 1
        assert "--translate-to" in capsys.readouterr().err

    def test_from_srt_translates_file(self, tmp_path):
        srt = tmp_path / "talk.srt"
        srt.write_text(generate_srt([Caption(0, 1000, "Hello"), Caption(1100, 2500, "Bye")]), encoding="utf-8")
        with patch("subtitle_generator.cli.GroqClient", _FakeClientContext):
            generator_main([str(srt), "--from-srt", "--translate-to", "sv"])

        out = tmp_path / "talk.sv.srt"
        assert out.read_text(encoding="utf-8") == generate_srt(
            [Caption(0, 1000, "HELLO"), Caption(1100, 2500, "BYE")]
        )

    def test_transcription_writes_default_srt(self, tmp_path):
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"video")
        captions = [Caption(0, 1200, "Hi")]
        output = SubtitleOutput(result=SubtitleResult(captions, generate_srt(captions), 1))

        with patch("subtitle_generator.cli.GroqClient", _FakeClientContext), \
                patch("subtitle_generator.cli.generate_subtitles",
                      new=AsyncMock(return_value=output)) as pipeline:
            generator_main([str(video), "--language", "en"])

        assert (tmp_path / "clip.srt").read_text(encoding="utf-8") == generate_srt(captions)
        assert pipeline.call_args.args[2].source_language == "en"

    def test_embed_writes_video(self, tmp_path):
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"video")
        output = SubtitleOutput(result=SubtitleResult(), video_bytes=b"burned")

        with patch("subtitle_generator.cli.GroqClient", _FakeClientContext), \
                patch("subtitle_generator.cli.generate_subtitles", new=AsyncMock(return_value=output)):
            generator_main([str(video), "--embed"])

        assert (tmp_path / "clip-subtitled.mp4").read_bytes() == b"burned"

    def test_pipeline_error_exits_1(self, tmp_path, capsys):
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"video")

        with patch("subtitle_generator.cli.GroqClient", _FakeClientContext), \
                patch("subtitle_generator.cli.generate_subtitles",
                      new=AsyncMock(side_effect=RuntimeError("ffmpeg exploded"))):
            with pytest.raises(SystemExit) as excinfo:
                generator_main([str(video)])

        assert excinfo.value.code == 1
        assert "Error: ffmpeg exploded" in capsys.readouterr().err
