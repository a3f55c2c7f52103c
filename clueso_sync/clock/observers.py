"""Clock observers that derive highlight and playhead state.

WHY: Transcript highlighting and the timeline playhead need the clock at
tick rate, but should only push an update to the UI when the derived
value actually changes (a new word, a new slide), not 60 times a second.

HOW: Each tracker subscribes to the slice of ClockState it needs, runs
the pure locator functions, and invokes its optional ``on_change``
callback only when the derived value differs from the last one.

RULES:
- While paused, ActiveWordTracker keeps the last active word instead of
  dropping to "no word"
- A relative time outside [0, slide.duration] means no active word
- close() unsubscribes; trackers are unusable afterwards
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from clueso_sync.clock.store import ClockStore
from clueso_sync.core.ir import Word
from clueso_sync.core.locator import find_active_word, find_active_word_for_slide, locate_slide


@dataclass(frozen=True)
class ActiveWord:
    """The slide and word currently highlighted."""

    slide_index: int = -1
    word_index: int = -1
    word: Optional[Word] = None


NO_ACTIVE_WORD = ActiveWord()


class ActiveWordTracker:
    """Tracks which word of which slide is being spoken."""

    def __init__(
        self,
        store: ClockStore,
        on_change: Optional[Callable[[ActiveWord], None]] = None,
    ) -> None:
        self.active = NO_ACTIVE_WORD
        self._on_change = on_change
        self._unsubscribe = store.subscribe(
            lambda s: (s.current_time, s.slides, s.is_playing),
            self._update,
            fire_immediately=True,
        )

    def _update(self, selected, _previous) -> None:
        current_time, slides, is_playing = selected

        if not is_playing and self.active.word_index != -1:
            return

        position = locate_slide(slides, current_time)
        if position.slide_index == -1:
            self._publish(NO_ACTIVE_WORD)
            return

        slide = slides[position.slide_index]
        word_index = -1
        if 0 <= position.relative_time <= slide.duration:
            word_index = find_active_word(slide.word_alignment, position.relative_time)
        word = slide.word_alignment[word_index] if word_index >= 0 else None
        self._publish(ActiveWord(position.slide_index, word_index, word))

    def _publish(self, active: ActiveWord) -> None:
        if (active.slide_index, active.word_index) == (self.active.slide_index, self.active.word_index):
            return
        self.active = active
        if self._on_change is not None:
            self._on_change(active)

    def close(self) -> None:
        self._unsubscribe()


class SlideWordTracker:
    """Tracks the active word index of a single slide (one transcript view)."""

    def __init__(
        self,
        store: ClockStore,
        slide_id: str,
        on_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.slide_id = slide_id
        self.word_index = -1
        self._on_change = on_change
        self._unsubscribe = store.subscribe(
            lambda s: (s.current_time, s.slides),
            self._update,
            fire_immediately=True,
        )

    def _update(self, selected, _previous) -> None:
        current_time, slides = selected
        index = find_active_word_for_slide(slides, self.slide_id, current_time)
        if index != self.word_index:
            self.word_index = index
            if self._on_change is not None:
                self._on_change(index)

    def close(self) -> None:
        self._unsubscribe()


class PlayheadTracker:
    """Keeps the latest clock position for a timeline playhead."""

    def __init__(self, store: ClockStore) -> None:
        self.position = store.current_time
        self._unsubscribe = store.subscribe(lambda s: s.current_time, self._update)

    def _update(self, current_time: float, _previous: float) -> None:
        self.position = current_time

    def close(self) -> None:
        self._unsubscribe()
