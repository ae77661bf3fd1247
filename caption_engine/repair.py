"""Timing repair pass: minimum duration, no overlap, minimum gap.

WHY: Segmented cues inherit the oracle's imprecise timestamps. Some are too
short to read, some overlap their neighbour, and some touch it with no gap,
which makes players flicker. One left-to-right pass fixes most of this
before encoding.

HOW: For every cue, in order:
  1. Extend a cue shorter than min_duration to start + min_duration.
  2. If it now starts before the previous cue ends, push its start to
     previous.end + min_gap.
  3. If the gap to the previous cue is still below min_gap, pull the
     previous cue's end back to start - min_gap.
Steps 2 and 3 only apply from the second cue on.

RULES:
- Mutates the Caption objects in place and returns the same list.
- Rule order is fixed. Step 3 can shrink a cue that step 1 extended, and
  step 2 can leave a cue shorter than min_duration (or even ending before it
  starts). Only the gap is guaranteed, not the duration.
- preserve_duration=True re-applies step 1 after step 2, trading later
  display for a guaranteed minimum duration on shifted cues.
"""

from typing import Dict, List

from .models import Caption


def repair_captions(
    captions: List[Caption],
    config: Dict,
    preserve_duration: bool = False,
) -> List[Caption]:
    """Enforce minimum duration, ordering and minimum gap on a cue list.

    Args:
        captions: Cues in time order. Modified in place.
        config: Constraint dict (min_duration_ms, min_gap_ms).
        preserve_duration: Re-extend cues shortened by a forward shift.

    Returns:
        The same list object, repaired.
    """
    min_duration = config["min_duration_ms"]
    min_gap = config["min_gap_ms"]

    for i, caption in enumerate(captions):
        if caption.end_ms - caption.start_ms < min_duration:
            caption.end_ms = caption.start_ms + min_duration

        if i == 0:
            continue
        previous = captions[i - 1]

        if caption.start_ms < previous.end_ms:
            caption.start_ms = previous.end_ms + min_gap
            if preserve_duration and caption.end_ms - caption.start_ms < min_duration:
                caption.end_ms = caption.start_ms + min_duration

        if caption.start_ms - previous.end_ms < min_gap:
            previous.end_ms = caption.start_ms - min_gap

    return captions
