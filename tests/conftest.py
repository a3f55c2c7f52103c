"""Shared test fixtures for the clueso_sync test suite.

WHY: Most test modules need the same small narrated project: a couple of
slides with hand-written word alignments whose timings are easy to
reason about. Centralizing them here keeps every module on the same
numbers.

HOW: Pytest fixtures provide:
  - narrated_slides: two aligned slides (2.0 s + 1.5 s, total 3.5 s)
  - plain_slides: three unaligned slides of 5, 8 and 3 seconds
  - fake_clock: a manually advanced clock for SimulatedMedia

RULES:
- Word times are slide-relative and contiguous within each slide
- Fixtures return fresh objects; tests may mutate them freely
"""

from typing import List

import pytest

from clueso_sync.core.ir import Slide, Word


def make_words(*spans) -> List[Word]:
    """Build a word list from (text, start, end) tuples."""
    return [Word(text=text, start_time=start, end_time=end) for text, start, end in spans]


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def narrated_slides() -> List[Slide]:
    """Two aligned slides: "intro" covers [0, 2.0), "demo" covers [2.0, 3.5)."""
    return [
        Slide(
            id="intro",
            script="Welcome to Clueso.",
            audio_url="https://cdn.example.com/intro.mp3",
            word_alignment=make_words(
                ("Welcome", 0.0, 0.8),
                ("to", 0.8, 1.1),
                ("Clueso.", 1.1, 2.0),
            ),
            duration=2.0,
        ),
        Slide(
            id="demo",
            script="Click the button.",
            audio_url="https://cdn.example.com/demo.mp3",
            word_alignment=make_words(
                ("Click", 0.0, 0.4),
                ("the", 0.4, 0.6),
                ("button.", 0.6, 1.5),
            ),
            duration=1.5,
        ),
    ]


@pytest.fixture
def plain_slides() -> List[Slide]:
    """Three slides without alignment, 5 s, 8 s and 3 s long."""
    return [
        Slide(id="s1", duration=5.0),
        Slide(id="s2", duration=8.0),
        Slide(id="s3", duration=3.0),
    ]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
