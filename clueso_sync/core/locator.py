"""Active-word lookup, slide lookup, and timeline layout.

WHY: Every clock tick (60 per second during playback) must answer two
questions: which slide is on screen, and which word of that slide is
being spoken. Both answers are pure functions of the clock value, so a
tick can never expose an inconsistent slide/word pair.

HOW: find_active_word() binary-searches a sorted alignment array.
locate_slide() linearly scans the (short) slide list using half-open
intervals. layout_slides() assigns global start times by prefix sum.

RULES:
- Word spans are inclusive at both ends; on an exact shared boundary the
  EARLIER word wins
- Slide intervals are half-open [start, start + duration)
- A time past the end of the timeline maps to the last slide with an
  extrapolated relative time (callers treat that as "no active word");
  a time before the first slide maps to slide 0 with a negative one
- Empty inputs return -1 / SlidePosition(-1, 0.0), never raise
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Sequence

from clueso_sync.core.ir import Slide, Timeline, Word


@dataclass(frozen=True)
class SlidePosition:
    """Where a global time lands on the timeline."""

    slide_index: int
    relative_time: float


NO_SLIDE = SlidePosition(slide_index=-1, relative_time=0.0)


def find_active_word(words: Sequence[Word], time: float) -> int:
    """Return the index of the word spoken at ``time``, or -1.

    WHY: Runs on every clock tick, so it must be O(log n).

    HOW: Binary search for the first word whose end_time >= time, then
    accept it if its start_time <= time. Searching for the first
    qualifying end makes the boundary tie-break deterministic: at a time
    equal to both words[i].end_time and words[i+1].start_time, i wins.

    RULES:
    - words must be sorted and non-overlapping
    - Returns -1 for an empty list or a time outside every span
    """
    if not words:
        return -1

    left, right = 0, len(words) - 1
    found = -1
    while left <= right:
        mid = (left + right) // 2
        if words[mid].end_time >= time:
            found = mid
            right = mid - 1
        else:
            left = mid + 1

    if found != -1 and words[found].start_time <= time:
        return found
    return -1


def locate_slide(slides: Sequence[Slide], global_time: float) -> SlidePosition:
    """Map a global time to (slide index, time within that slide)."""
    if not slides:
        return NO_SLIDE

    first = slides[0]
    # Before the first slide: slide 0 at a negative time, so no word matches
    if global_time < first.start_time:
        return SlidePosition(0, global_time - first.start_time)

    for index, slide in enumerate(slides):
        if slide.start_time <= global_time < slide.start_time + slide.duration:
            return SlidePosition(index, global_time - slide.start_time)

    # Past the end: clamp to the last slide
    last = slides[-1]
    return SlidePosition(len(slides) - 1, global_time - last.start_time)


def find_active_word_for_slide(
    slides: Sequence[Slide],
    slide_id: str,
    global_time: float,
) -> int:
    """Return the active word index within one particular slide, or -1.

    RULES:
    - -1 if no slide has ``slide_id``
    - -1 if global_time falls outside [start, start + duration] of that slide
    """
    for slide in slides:
        if slide.id != slide_id:
            continue
        relative = global_time - slide.start_time
        if relative < 0 or relative > slide.duration:
            return -1
        return find_active_word(slide.word_alignment, relative)
    return -1


def active_word_at(slides: Sequence[Slide], global_time: float) -> int:
    """Return the active word index of whichever slide covers ``global_time``."""
    position = locate_slide(slides, global_time)
    if position.slide_index == -1:
        return -1
    slide = slides[position.slide_index]
    if position.relative_time < 0 or position.relative_time > slide.duration:
        return -1
    return find_active_word(slide.word_alignment, position.relative_time)


def layout_slides(slides: Sequence[Slide]) -> Timeline:
    """Lay slides out back-to-back and return the resulting Timeline.

    HOW: Running prefix sum over durations in list order. Each slide is
    copied with its new start_time; the input objects are not modified,
    so calling this twice on the same input yields identical output.
    """
    laid_out = []
    elapsed = 0.0
    for slide in slides:
        laid_out.append(dataclasses.replace(slide, start_time=elapsed))
        elapsed += slide.duration
    return Timeline(slides=tuple(laid_out), total_duration=elapsed)
