"""In-process media element driven by a monotonic clock.

WHY: The sync loop must be exercisable without a browser: the CLI preview
plays a project in the terminal, and the tests need deterministic control
over positions, play latency, and injected failures.

HOW: Position is tracked as an anchor (position + clock reading at the
last play/seek). While playing, current_time extrapolates from the anchor
at ``rate``. play() optionally sleeps ``play_latency`` seconds before
starting; a pause() during that window rejects the play with
PlaybackAbortedError, mirroring browser behaviour.

RULES:
- Position is clamped to [0, duration] when a duration is set
- Reaching the duration while playing pauses and emits "ended" once
- fail_next_play (an exception) is raised by the next play() call only
- fail_seeks=True makes every position write raise MediaPlaybackError
- Every position write emits "timeupdate"
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from clueso_sync.playback.media import MediaPlaybackError, PlayableMedia, PlaybackAbortedError


class SimulatedMedia(PlayableMedia):
    """A media element whose clock is ``clock()`` scaled by ``rate``."""

    def __init__(
        self,
        name: str = "media",
        duration: Optional[float] = None,
        rate: float = 1.0,
        play_latency: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(name)
        self.duration = duration
        self.rate = rate
        self.play_latency = play_latency
        self.fail_next_play: Optional[BaseException] = None
        self.fail_seeks = False
        self.play_calls = 0
        self.pause_calls = 0
        self._clock = clock
        self._position = 0.0
        self._anchor: Optional[float] = None
        self._generation = 0

    @property
    def current_time(self) -> float:
        if self._anchor is None:
            return self._position
        position = self._position + (self._clock() - self._anchor) * self.rate
        if self.duration is not None and position >= self.duration:
            self._position = self.duration
            self._anchor = None
            self._emit("ended")
            return self._position
        return position

    @current_time.setter
    def current_time(self, value: float) -> None:
        if self.fail_seeks:
            raise MediaPlaybackError("{}: seek rejected".format(self.name))
        value = max(0.0, value)
        if self.duration is not None:
            value = min(value, self.duration)
        self._position = value
        if self._anchor is not None:
            self._anchor = self._clock()
        self._emit("timeupdate", value)

    @property
    def paused(self) -> bool:
        return self._anchor is None

    async def play(self) -> None:
        self.play_calls += 1
        if self.fail_next_play is not None:
            error, self.fail_next_play = self.fail_next_play, None
            raise error

        generation = self._generation
        if self.play_latency > 0:
            await asyncio.sleep(self.play_latency)
        if generation != self._generation:
            raise PlaybackAbortedError("{}: play() interrupted by pause()".format(self.name))

        if self._anchor is None:
            self._anchor = self._clock()

    def pause(self) -> None:
        self.pause_calls += 1
        self._generation += 1
        if self._anchor is not None:
            self._position = self.current_time
            self._anchor = None

    def fail(self, message: str = "decode error") -> None:
        """Simulate a resource failure: stop and emit "error"."""
        self._anchor = None
        self._emit("error", MediaPlaybackError("{}: {}".format(self.name, message)))
