"""Batch translation of finished cues through a line-oriented oracle.

WHY: Translating cue by cue costs one oracle round trip per cue and loses
context; translating the whole file at once makes the reply impossible to map
back onto cues. Numbered batches keep both context and a stable mapping.

HOW: Cues are cut into batches of ten. Each batch becomes one request where
every line is "[N] text", N being the cue's 1-based position in the batch and
any line break rendered as " | ". The reply is parsed line by line with
^\\[(\\d+)\\]\\s*(.+)$ and each match replaces the text of cue N, with " | "
turned back into a line break.

RULES:
- Returns new Caption objects; the input list and its cues are untouched.
- Length, order and timings never change, only text.
- Reply lines that do not match, or name an index outside the batch, are
  ignored. The affected cues keep their source text.
- An oracle error fails only its own batch: it is logged, the batch keeps
  its source text, and the remaining batches still run.
"""

import logging
import re
from typing import List, Protocol, Sequence

from .models import Caption

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
LINE_MARKER = " | "
REPLY_LINE_RE = re.compile(r"^\[(\d+)\]\s*(.+)$")


class TranslationOracle(Protocol):
    """Anything that can translate a block of numbered subtitle lines."""

    async def translate_batch(self, text: str, target_language: str) -> str:
        ...


def serialize_batch(batch: Sequence[Caption]) -> str:
    """Render cues as numbered lines: "[1] first | second"."""
    return "\n".join(
        "[{}] {}".format(idx, caption.text.replace("\n", LINE_MARKER, 1))
        for idx, caption in enumerate(batch, 1)
    )


def apply_reply(batch: List[Caption], reply: str) -> int:
    """Write parsed reply lines onto the matching cues of a batch.

    Leading and trailing whitespace on a reply line is ignored. Returns the
    number of cues whose text was replaced.
    """
    applied = 0
    for line in reply.split("\n"):
        match = REPLY_LINE_RE.match(line.strip())
        if not match:
            continue
        idx = int(match.group(1)) - 1
        if 0 <= idx < len(batch):
            batch[idx].text = match.group(2).strip().replace(LINE_MARKER, "\n", 1)
            applied += 1
    return applied


async def translate_captions(
    captions: Sequence[Caption],
    target_language: str,
    oracle: TranslationOracle,
    batch_size: int = BATCH_SIZE,
) -> List[Caption]:
    """Translate cue text batch by batch, keeping timings and indices.

    Args:
        captions: Cues to translate.
        target_language: Language code or name handed to the oracle.
        oracle: TranslationOracle implementation (e.g. GroqClient).
        batch_size: Cues per oracle request.

    Returns:
        A new cue list with translated text where the reply could be parsed.
    """
    translated = [Caption(c.start_ms, c.end_ms, c.text) for c in captions]

    for offset in range(0, len(translated), batch_size):
        batch = translated[offset:offset + batch_size]
        batch_no = offset // batch_size + 1
        try:
            reply = await oracle.translate_batch(serialize_batch(batch), target_language)
        except Exception as exc:
            logger.warning(
                "Translation batch %d failed, keeping source text: %s", batch_no, exc
            )
            continue

        applied = apply_reply(batch, reply or "")
        logger.debug("Translation batch %d: %d/%d cue(s) replaced", batch_no, applied, len(batch))

    return translated
