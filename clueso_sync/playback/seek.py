"""Click-to-seek dispatcher for transcript words, timeline, and ruler.

WHY: Three UI surfaces let the user jump in time: clicking a transcript
word, clicking the timeline track, and clicking the time ruler. Each
speaks a different coordinate system (slide-relative seconds, pixels)
but all must end up as one clamped global seek on the shared clock.

HOW: Each handler converts its input to global seconds and calls
ClockStore.seek_to(). Media elements follow automatically: a running
MediaSynchronizer observes the clock jump and seeks its elements.

RULES:
- Word clicks seek to the word's own start (slide start + word start)
- Pixel offsets convert via pixels_per_second and clamp to [0, total]
- pixels_per_second must be > 0
- Every handler returns the global time actually seeked to
"""

from __future__ import annotations

import logging

from clueso_sync.clock.store import ClockStore
from clueso_sync.config import DEFAULT_PIXELS_PER_SECOND

logger = logging.getLogger(__name__)


class SeekDispatcher:
    """Translates UI clicks into clock seeks."""

    def __init__(
        self,
        store: ClockStore,
        pixels_per_second: float = DEFAULT_PIXELS_PER_SECOND,
    ) -> None:
        self._store = store
        self.pixels_per_second = 0.0
        self.set_zoom(pixels_per_second)

    def set_zoom(self, pixels_per_second: float) -> None:
        """Change the timeline zoom factor.

        Raises:
            ValueError: If pixels_per_second is not positive.
        """
        if pixels_per_second <= 0:
            raise ValueError(
                "pixels_per_second must be positive, got {}".format(pixels_per_second)
            )
        self.pixels_per_second = float(pixels_per_second)

    def pixels_to_time(self, offset_px: float) -> float:
        seconds = offset_px / self.pixels_per_second
        return max(0.0, min(seconds, self._store.total_duration))

    def time_to_pixels(self, time: float) -> float:
        return time * self.pixels_per_second

    def on_word_click(self, global_start_time: float) -> float:
        """Seek to a word whose global start time the view already knows."""
        return self._store.seek_to(global_start_time)

    def on_slide_word_click(self, slide_index: int, word_index: int) -> float:
        """Seek to word ``word_index`` of slide ``slide_index``.

        Raises:
            IndexError: If either index is out of range.
        """
        slide = self._store.slides[slide_index]
        return self.on_word_click(slide.global_word_start(word_index))

    def on_timeline_click(self, offset_px: float) -> float:
        target = self.pixels_to_time(offset_px)
        logger.debug("Timeline click at %.1fpx -> %.3fs", offset_px, target)
        return self._store.seek_to(target)

    def on_ruler_click(self, offset_px: float) -> float:
        target = self.pixels_to_time(offset_px)
        logger.debug("Ruler click at %.1fpx -> %.3fs", offset_px, target)
        return self._store.seek_to(target)
