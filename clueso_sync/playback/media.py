"""Abstract playable media element and playback error types.

WHY: The sync loop drives a video element and a voice-over element that
it does not own. A small abstract interface lets the same loop run
against a browser bridge, a native player, or the in-process simulation
used by the CLI preview and the tests.

HOW: PlayableMedia is an ABC with a readable/writable ``current_time``,
a ``paused`` flag, an awaitable ``play()`` and a synchronous ``pause()``.
Lifecycle events (timeupdate, ended, canplay, loadedmetadata, error) are
delivered through a per-element callback registry: ``on()`` registers,
``_emit()`` dispatches.

RULES:
- play() may reject with PlaybackAbortedError when a pause() interrupts
  it; that is a normal race, not a failure
- Any other exception from play() is a genuine playback failure
- Event callbacks receive the element and an optional payload
- A raising event callback is logged and does not stop dispatch
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

MEDIA_EVENTS = frozenset({"timeupdate", "ended", "canplay", "loadedmetadata", "error"})

EventCallback = Callable[["PlayableMedia", Any], None]


class MediaPlaybackError(Exception):
    """A genuine playback failure (decode error, network failure, ...)."""


class PlaybackAbortedError(MediaPlaybackError):
    """play() was interrupted by pause() or a newer load; expected and ignorable."""


class PlayableMedia(ABC):
    """Abstract handle on a playable resource (video or audio)."""

    def __init__(self, name: str = "media") -> None:
        self.name = name
        self._listeners: Dict[str, List[EventCallback]] = {}

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Playback position in seconds."""

    @current_time.setter
    @abstractmethod
    def current_time(self, value: float) -> None:
        """Move the playback position."""

    @property
    @abstractmethod
    def paused(self) -> bool:
        """True unless the element is actively playing."""

    @abstractmethod
    async def play(self) -> None:
        """Request playback; completes once playback has actually started.

        Raises:
            PlaybackAbortedError: If interrupted by pause().
            MediaPlaybackError: On any genuine failure.
        """

    @abstractmethod
    def pause(self) -> None:
        """Pause playback immediately."""

    def on(self, event: str, callback: EventCallback) -> Callable[[], None]:
        """Register ``callback`` for ``event`` and return an unregister function."""
        if event not in MEDIA_EVENTS:
            raise ValueError("Unknown media event '{}'".format(event))
        self._listeners.setdefault(event, []).append(callback)

        def off() -> None:
            callbacks = self._listeners.get(event, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return off

    def _emit(self, event: str, payload: Optional[Any] = None) -> None:
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(self, payload)
            except Exception:
                logger.exception("%s: '%s' listener failed", self.name, event)

    def __repr__(self) -> str:
        return "<{} {!r}>".format(type(self).__name__, self.name)
