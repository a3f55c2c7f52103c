"""Shared clock store: the single owner of playback position and play state.

WHY: Three clocks (video, voice-over, UI playhead) must agree on "now".
Giving exactly one object ownership of currentTime and isPlaying, and
forcing every writer through its actions, means every observer sees the
same sequence of states. Selector subscriptions let a 60 Hz time update
reach only the observers that actually read the time.

HOW: ClockState is an immutable snapshot. Each action builds the next
snapshot with dataclasses.replace() and then notifies subscribers. A
subscriber registers a selector (state -> slice) and a callback; the
callback runs only when the selected slice differs from what that
subscriber last saw, using shallow equality.

RULES:
- set_current_time() does NOT clamp; seek_to() clamps to [0, total_duration]
- play()/pause()/toggle_play() only flip the flag; media reacts elsewhere
- set_slides() re-lays out start times and resets time and slide index
- update_slide_script() never touches alignment or duration
- add_audio_clip() replaces any existing clip for the same slide
- A raising subscriber is logged and does not block other subscribers
- Single-threaded (asyncio); no locking
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from clueso_sync.core.ir import AudioClip, Slide
from clueso_sync.core.locator import layout_slides, locate_slide

logger = logging.getLogger(__name__)

Selector = Callable[["ClockState"], Any]
Listener = Callable[[Any, Any], None]
Equality = Callable[[Any, Any], bool]
Unsubscribe = Callable[[], None]

_SCALARS = (int, float, str, bool, bytes, type(None))


class SlideNotFoundError(KeyError):
    """Raised when an action names a slide id the store does not hold."""


@dataclass(frozen=True)
class ClockState:
    """Immutable snapshot of the shared clock.

    RULES:
    - total_duration == sum(slide.duration for slide in slides)
    - current_slide_index is the slide whose [start, end) contains
      current_time, the last slide once current_time >= total_duration,
      and 0 when there are no slides
    """

    current_time: float = 0.0
    is_playing: bool = False
    slides: Tuple[Slide, ...] = ()
    audio_clips: Tuple[AudioClip, ...] = ()
    current_slide_index: int = 0
    total_duration: float = 0.0


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if isinstance(a, _SCALARS) and isinstance(b, _SCALARS):
        return a == b
    return False


def shallow_equal(a: Any, b: Any) -> bool:
    """Compare two selected slices one level deep.

    Scalars compare by value, containers (tuples, lists, dicts) compare
    element by element, and everything else compares by identity.
    """
    if _same(a, b):
        return True
    if isinstance(a, (tuple, list)) and isinstance(b, (tuple, list)):
        return type(a) is type(b) and len(a) == len(b) and all(
            _same(x, y) for x, y in zip(a, b)
        )
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_same(a[k], b[k]) for k in a)
    return False


class _Subscription:
    __slots__ = ("selector", "listener", "equality", "last", "active")

    def __init__(self, selector: Selector, listener: Listener, equality: Equality, last: Any) -> None:
        self.selector = selector
        self.listener = listener
        self.equality = equality
        self.last = last
        self.active = True


class ClockStore:
    """Explicit, injectable container for the shared clock.

    WHY: UI observers, the sync loop, and click handlers all need the same
    clock. Passing one store instance to each of them (instead of a module
    global) keeps ownership visible and makes tests independent.

    HOW: Holds the current ClockState and a list of subscriptions. Every
    action funnels through _set(), which swaps the snapshot and notifies.
    Notification re-reads the live state for each subscriber, so an action
    triggered from inside a callback is observed exactly once by everyone.
    """

    def __init__(self, slides: Optional[Iterable[Slide]] = None) -> None:
        self._state = ClockState()
        self._subscriptions: List[_Subscription] = []
        if slides is not None:
            self.set_slides(slides)

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get_state(self) -> ClockState:
        return self._state

    @property
    def current_time(self) -> float:
        return self._state.current_time

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def slides(self) -> Tuple[Slide, ...]:
        return self._state.slides

    @property
    def audio_clips(self) -> Tuple[AudioClip, ...]:
        return self._state.audio_clips

    @property
    def current_slide_index(self) -> int:
        return self._state.current_slide_index

    @property
    def total_duration(self) -> float:
        return self._state.total_duration

    def subscribe(
        self,
        selector: Selector,
        listener: Listener,
        equality: Optional[Equality] = None,
        fire_immediately: bool = False,
    ) -> Unsubscribe:
        """Register ``listener(selected, previous)`` for changes of a slice.

        Args:
            selector: Extracts the slice of state this observer cares about.
            listener: Called with the new and previous slice on change.
            equality: Custom comparison; defaults to shallow_equal.
            fire_immediately: Call the listener once right away with the
                current slice (previous is the same value).

        Returns:
            A callable that removes the subscription. Safe to call twice.
        """
        current = selector(self._state)
        subscription = _Subscription(selector, listener, equality or shallow_equal, current)
        self._subscriptions.append(subscription)
        if fire_immediately:
            listener(current, current)

        def unsubscribe() -> None:
            subscription.active = False
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def set_current_time(self, time: float) -> None:
        """Set the clock without clamping (raw media time from the sync loop)."""
        index = self._slide_index_for(self._state.slides, time)
        self._set(current_time=time, current_slide_index=index)

    def seek_to(self, time: float) -> float:
        """Clamp ``time`` to the timeline, set the clock, and return it."""
        clamped = max(0.0, min(time, self._state.total_duration))
        self.set_current_time(clamped)
        return clamped

    def play(self) -> None:
        self._set(is_playing=True)

    def pause(self) -> None:
        self._set(is_playing=False)

    def toggle_play(self) -> None:
        self._set(is_playing=not self._state.is_playing)

    def set_slides(self, slides: Iterable[Slide]) -> None:
        """Replace all slides, lay them out, and rewind to the start."""
        timeline = layout_slides(list(slides))
        self._set(
            slides=timeline.slides,
            total_duration=timeline.total_duration,
            current_slide_index=0,
            current_time=0.0,
        )

    def update_slide_script(self, slide_id: str, script: str) -> None:
        """Replace the script text of one slide.

        Raises:
            SlideNotFoundError: If no slide has ``slide_id``.
        """
        slides = list(self._state.slides)
        for i, slide in enumerate(slides):
            if slide.id == slide_id:
                slides[i] = dataclasses.replace(slide, script=script)
                self._set(slides=tuple(slides))
                return
        raise SlideNotFoundError(slide_id)

    def set_audio_clips(self, clips: Sequence[AudioClip]) -> None:
        self._set(audio_clips=tuple(clips))

    def add_audio_clip(self, clip: AudioClip) -> None:
        """Add a clip, replacing the existing clip for the same slide."""
        kept = tuple(c for c in self._state.audio_clips if c.slide_id != clip.slide_id)
        if len(kept) != len(self._state.audio_clips):
            logger.debug("Replacing audio clip for slide %s", clip.slide_id)
        self._set(audio_clips=kept + (clip,))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _slide_index_for(slides: Sequence[Slide], time: float) -> int:
        # No slides → 0, matching the initial state
        return max(0, locate_slide(slides, time).slide_index)

    def _set(self, **changes: Any) -> None:
        self._state = dataclasses.replace(self._state, **changes)
        self._notify()

    def _notify(self) -> None:
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            selected = subscription.selector(self._state)
            if subscription.equality(selected, subscription.last):
                continue
            previous = subscription.last
            subscription.last = selected
            try:
                subscription.listener(selected, previous)
            except Exception:
                logger.exception("Clock subscriber %r failed", subscription.listener)
