"""Subtitle generator: video in, timed and readable subtitles out.

WHY: Speech-recognition services return sentence-level text with rough
timestamps. This package wraps the caption_engine library with everything
needed to go from a video file to finished subtitles: ffmpeg audio handling,
the Groq API client, an async pipeline, a CLI and an HTTP API.

HOW: Four layers: media (ffmpeg), api (Groq), pipeline (orchestration),
and the two front ends (cli, server). The caption engine itself stays a
pure library with no knowledge of any of them.

RULES:
- The Groq client is always passed into the pipeline explicitly
- All timing work happens in caption_engine, in integer milliseconds
"""

__version__ = "0.1.0"
