"""Syllable-based duration estimation and word alignment.

WHY: Generated voice tracks arrive without word timestamps. To highlight
the word being spoken we need per-word spans, and to lay out a slide
before audio exists we need a spoken-duration estimate. Both are derived
from an English syllable heuristic.

HOW: count_syllables() applies a vowel-group heuristic per word.
estimate_duration() divides the syllable total by the speech rate and
adds a fixed pause per punctuation mark. align_words() distributes a
known total duration across words proportionally to syllable weight,
giving words with trailing punctuation a little extra time.

RULES:
- Words are whitespace-separated tokens; empty tokens are discarded
- Words of 3 letters or fewer count as 1 syllable
- Otherwise count [aeiouy]+ groups (min 1), then subtract 1 (floor 1) for
  a silent trailing "e" not preceded by "l", and 1 (floor 1) for a
  trailing "ed" whose preceding letter is not a vowel
- Duration = syllables / 3.5 + 0.15 per [.,!?;:] mark; never negative
- Alignment times are rounded to 3 decimals and the last word ends at
  exactly total_duration
- Empty text or non-positive duration → [] (never raises)
"""

from __future__ import annotations

import re
from typing import List, Tuple

from clueso_sync.config import (
    PUNCTUATION_PAUSE_S,
    PUNCTUATION_WEIGHT,
    SPEECH_RATE_SYLLABLES_PER_S,
    TIME_DECIMALS,
)
from clueso_sync.core.ir import Word

_NON_LETTERS_RE = re.compile(r"[^a-z]")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")
_PAUSE_MARK_RE = re.compile(r"[.,!?;:]")
_TRAILING_PAUSE_RE = re.compile(r"[.,!?;:]$")

_VOWELS = frozenset("aeiouy")


def tokenize(text: str) -> List[str]:
    """Split narration text into words, keeping their surface form."""
    return text.split()


def count_syllables(word: str) -> int:
    """Estimate the syllable count of a single word.

    The heuristic is English-only and deliberately approximate; timing
    expectations downstream are calibrated to it.
    """
    letters = _NON_LETTERS_RE.sub("", word.lower())
    if len(letters) <= 3:
        return 1

    count = max(1, len(_VOWEL_GROUP_RE.findall(letters)))

    # Silent trailing "e" ("make"), but not "-le" ("table")
    if letters.endswith("e") and letters[-2] != "l":
        count = max(1, count - 1)

    # "-ed" folded into the previous syllable ("jumped"); a vowel before
    # "ed" already merged into one vowel group ("played")
    if letters.endswith("ed") and letters[-3] not in _VOWELS:
        count = max(1, count - 1)

    return count


def estimate_duration(text: str) -> float:
    """Estimate how long ``text`` takes to speak, in seconds.

    Returns 0.0 for empty or whitespace-only text.
    """
    words = tokenize(text)
    if not words:
        return 0.0

    syllables = sum(count_syllables(w) for w in words)
    base = syllables / SPEECH_RATE_SYLLABLES_PER_S
    pauses = len(_PAUSE_MARK_RE.findall(text)) * PUNCTUATION_PAUSE_S
    return max(0.0, base + pauses)


def _word_weight(word: str) -> float:
    weight = float(count_syllables(word))
    if _TRAILING_PAUSE_RE.search(word):
        weight += PUNCTUATION_WEIGHT
    return weight


def align_words(text: str, total_duration: float) -> List[Word]:
    """Distribute ``total_duration`` across the words of ``text``.

    WHY: TTS engines used here return audio only. Syllable-weighted
    proportional allocation is a close enough stand-in for forced
    alignment to drive karaoke-style highlighting.

    HOW: Each word gets weight = syllables (+0.3 with trailing
    punctuation). Walking left to right, a word's span is its share of
    the total weight times the total duration. Spans are rounded to
    milliseconds and the final end is pinned to total_duration so
    rounding error never leaves a gap at the end.

    RULES:
    - Returns [] for empty text or total_duration <= 0
    - words[0].start_time == 0 and words[-1].end_time == total_duration
    - Spans are contiguous: words[i].end_time == words[i+1].start_time

    Args:
        text: Narration text for one slide.
        total_duration: Length of the slide's voice track in seconds.

    Returns:
        Word spans relative to the start of the slide.
    """
    tokens = tokenize(text)
    if not tokens or total_duration <= 0:
        return []

    weights = [_word_weight(t) for t in tokens]
    total_weight = sum(weights)

    words: List[Word] = []
    current = 0.0
    start = 0.0
    for token, weight in zip(tokens, weights):
        current += (weight / total_weight) * total_duration
        end = round(current, TIME_DECIMALS)
        words.append(Word(text=token, start_time=start, end_time=end))
        # Next word starts where this one ended (rounded) so spans never gap
        start = end

    last = words[-1]
    words[-1] = Word(
        text=last.text,
        start_time=min(last.start_time, total_duration),
        end_time=total_duration,
    )
    return words


def estimate_alignment(text: str) -> Tuple[float, List[Word]]:
    """Estimate a duration for ``text`` and align its words to it."""
    duration = estimate_duration(text)
    return duration, align_words(text, duration)
