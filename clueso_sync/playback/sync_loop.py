"""Drift-correcting synchronization between media elements and the clock.

WHY: The muted screen recording (master) and the separately generated
voice-over (slave) play on independent clocks. Left alone they drift
apart, and a naive play()/pause() sequence races itself: a pause issued
while a play request is still pending makes the platform reject the
play. The transcript highlight also needs the master's position at
frame rate.

HOW: MediaSynchronizer is an explicit state machine
(STOPPED → PLAYING ⇄ PAUSED, with a transient SEEKING state) driven by
ClockStore subscriptions:
  is_playing flips      → _start_playback() / _stop_playback()
  current_time changes  → seek(), unless the synchronizer wrote the value
                          itself (clock pull, pause, ended)
Every transition runs under one asyncio.Lock, so a pause can only start
after the in-flight play request has settled; the race is impossible by
construction rather than caught after the fact. While PLAYING two tasks
run: a ~60 Hz clock pull (master position → store) and a 100 ms drift
check (slave position ← master position when they differ by more than
the tolerance).

RULES:
- The master is the source of truth; correction only ever moves the slave
- The clock pull writes only while the master is actually playing
- Drift correction is suspended while SEEKING
- PlaybackAbortedError from play() is swallowed (DEBUG); any other play
  failure is logged (ERROR) and the store is forced back to paused
- Any clock write not made by the synchronizer is a seek, however small
- A failed drift correction or clock read is logged (WARNING) and
  retried next interval; the loops only end when cancelled
- toggle() is debounced: a second toggle within toggle_debounce_s is ignored
- close()/aclose() cancel every task and subscription (view unmount)
- start() must be called from inside the running event loop
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, List, Optional, Set

from clueso_sync.clock.store import ClockStore
from clueso_sync.config import (
    CLOCK_TICK_HZ,
    DRIFT_CHECK_INTERVAL_S,
    DRIFT_TOLERANCE_S,
    TOGGLE_DEBOUNCE_S,
)
from clueso_sync.playback.media import PlayableMedia, PlaybackAbortedError

logger = logging.getLogger(__name__)


class SyncState(str, enum.Enum):
    """Playback session states.

    RULES:
    - stopped: never played since start() (or closed)
    - playing: media running, clock pull and drift check active
    - paused: media paused, loops cancelled
    - seeking: positions being moved; drift correction suspended
    """

    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"
    SEEKING = "seeking"


@dataclass
class SyncConfig:
    """Tuning values for one synchronizer; defaults come from config.py."""

    drift_tolerance_s: float = DRIFT_TOLERANCE_S
    drift_check_interval_s: float = DRIFT_CHECK_INTERVAL_S
    clock_tick_hz: int = CLOCK_TICK_HZ
    toggle_debounce_s: float = TOGGLE_DEBOUNCE_S


class MediaSynchronizer:
    """Keeps a master element, an optional slave element, and a ClockStore in lockstep.

    Use as an async context manager, or call start() and close() yourself:

        async with MediaSynchronizer(store, video, voice) as sync:
            store.play()
            ...
    """

    def __init__(
        self,
        store: ClockStore,
        master: PlayableMedia,
        slave: Optional[PlayableMedia] = None,
        config: Optional[SyncConfig] = None,
    ) -> None:
        self._store = store
        self._master = master
        self._slave = slave
        self.config = config or SyncConfig()
        self.state = SyncState.STOPPED
        self.corrections = 0

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock: Optional[asyncio.Lock] = None
        self._clock_task: Optional[asyncio.Task] = None
        self._drift_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self._unsubscribers: List[Callable[[], None]] = []
        self._pending_seeks = 0
        self._writing_clock = False
        self._toggle_in_progress = False
        self._toggle_handle: Optional[asyncio.TimerHandle] = None

    @property
    def media(self) -> List[PlayableMedia]:
        if self._slave is None:
            return [self._master]
        return [self._master, self._slave]

    @property
    def is_started(self) -> bool:
        return self._loop is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Attach to the store and media events.

        Raises:
            RuntimeError: If called outside a running event loop.
        """
        if self.is_started:
            return
        self._loop = asyncio.get_running_loop()
        self._lock = asyncio.Lock()

        self._unsubscribers.append(
            self._store.subscribe(lambda s: s.is_playing, self._on_play_flag)
        )
        self._unsubscribers.append(
            self._store.subscribe(lambda s: s.current_time, self._on_clock_time)
        )
        self._unsubscribers.append(self._master.on("ended", self._on_master_ended))
        for media in self.media:
            self._unsubscribers.append(media.on("error", self._on_media_error))

        logger.debug("Synchronizer started (master=%s, slave=%s)", self._master, self._slave)
        if self._store.is_playing:
            self._spawn(self._start_playback())

    def close(self) -> None:
        """Tear down loops, pending transitions, and subscriptions."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._stop_loops()
        for task in list(self._tasks):
            task.cancel()
        if self._toggle_handle is not None:
            self._toggle_handle.cancel()
            self._toggle_handle = None
        self._toggle_in_progress = False
        self._pending_seeks = 0
        if self.is_started:
            self._pause_all()
        self._loop = None
        self.state = SyncState.STOPPED
        logger.debug("Synchronizer closed")

    async def aclose(self) -> None:
        """close() and wait for the cancelled tasks to finish unwinding."""
        pending = [t for t in (self._clock_task, self._drift_task) if t is not None]
        pending.extend(self._tasks)
        self.close()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def __aenter__(self) -> MediaSynchronizer:
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def settle(self) -> None:
        """Wait until every scheduled transition (play, pause, seek) has run."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def play(self) -> None:
        self._store.play()

    def pause(self) -> None:
        self._store.pause()

    def toggle(self) -> bool:
        """Flip play/pause unless a toggle happened within the debounce window.

        Returns:
            True if the toggle was applied, False if it was debounced.
        """
        if self._toggle_in_progress:
            logger.debug("Ignoring toggle: previous toggle still in progress")
            return False
        self._toggle_in_progress = True
        loop = self._loop or asyncio.get_running_loop()
        self._toggle_handle = loop.call_later(self.config.toggle_debounce_s, self._release_toggle)
        self._store.toggle_play()
        return True

    def _release_toggle(self) -> None:
        self._toggle_in_progress = False
        self._toggle_handle = None

    async def seek(self, time: float) -> float:
        """Seek the clock and every element to ``time`` (clamped to the timeline).

        Returns:
            The clamped target time.
        """
        if self._lock is None:
            raise RuntimeError("MediaSynchronizer.start() has not been called")
        self._pending_seeks += 1
        try:
            target = self._store.seek_to(time)
            await self._seek_media(target)
        finally:
            self._pending_seeks -= 1
        return target

    async def _seek_from_clock(self, time: float) -> None:
        try:
            await self._seek_media(time)
        finally:
            self._pending_seeks -= 1

    async def _seek_media(self, time: float) -> None:
        """Move every element to ``time``, resuming playback if it was running.

        HOW: Enters SEEKING, stops the loops and pauses the media if they
        were playing, writes the position into each element, then re-issues
        play and restarts the loops if the store still wants playback.
        """
        async with self._lock:
            previous = self.state
            resume = previous is SyncState.PLAYING
            self.state = SyncState.SEEKING

            if resume:
                self._stop_loops()
                self._pause_all()

            for media in self.media:
                self._set_position(media, time)
            logger.debug("Seeked %d element(s) to %.3fs", len(self.media), time)

            if resume and self._store.is_playing:
                if await self._issue_play():
                    self.state = SyncState.PLAYING
                    self._start_loops()
                else:
                    self.state = SyncState.PAUSED
            elif previous is SyncState.STOPPED:
                self.state = SyncState.STOPPED
            else:
                self.state = SyncState.PAUSED

    # ------------------------------------------------------------------
    # Drift correction
    # ------------------------------------------------------------------

    def correct_drift(self) -> bool:
        """Pull the slave to the master if they differ by more than the tolerance.

        Returns:
            True if the slave position was corrected.
        """
        if self._slave is None or self.state is SyncState.SEEKING:
            return False
        try:
            master_time = self._master.current_time
            drift = abs(master_time - self._slave.current_time)
            if drift <= self.config.drift_tolerance_s:
                return False
            self._slave.current_time = master_time
        except Exception as exc:
            logger.warning("Drift correction failed, retrying next interval: %s", exc)
            return False
        self.corrections += 1
        logger.debug("Corrected %.3fs of drift on %s", drift, self._slave.name)
        return True

    # ------------------------------------------------------------------
    # Store reactions
    # ------------------------------------------------------------------

    def _on_play_flag(self, is_playing: bool, _previous: bool) -> None:
        if is_playing:
            self._spawn(self._start_playback())
        else:
            self._spawn(self._stop_playback())

    def _on_clock_time(self, current_time: float, _previous: float) -> None:
        if self._writing_clock or self._pending_seeks or self.state is SyncState.SEEKING:
            return
        self._pending_seeks += 1
        self._spawn(self._seek_from_clock(current_time))

    def _on_master_ended(self, media: PlayableMedia, _payload: Any) -> None:
        logger.info("%s ended at %.3fs", media.name, media.current_time)
        self._write_clock(media.current_time)
        self._store.pause()

    def _on_media_error(self, media: PlayableMedia, error: Any) -> None:
        logger.error("%s reported a playback error: %s", media.name, error)
        self._store.pause()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _start_playback(self) -> None:
        async with self._lock:
            if not self._store.is_playing or self.state is SyncState.PLAYING:
                return
            if self._slave is not None:
                self._set_position(self._slave, self._master.current_time)
            if await self._issue_play():
                self.state = SyncState.PLAYING
                self._start_loops()
                logger.debug("Playback started at %.3fs", self._master.current_time)

    async def _stop_playback(self) -> None:
        async with self._lock:
            if self._store.is_playing:
                return
            self._stop_loops()
            self._pause_all()
            if self.state is SyncState.PLAYING:
                self.state = SyncState.PAUSED
                self._write_clock(self._master.current_time)
                logger.debug("Playback paused at %.3fs", self._store.current_time)

    async def _issue_play(self) -> bool:
        """Request play on every element concurrently; False if playback did not start.

        An aborted request (a pause() landed while play() was pending) is
        not an error and is only logged at DEBUG, but it still pauses the
        store like a real failure: the request did not start the media,
        and the store must not claim playback that is not happening.
        """
        results = await asyncio.gather(
            *(media.play() for media in self.media),
            return_exceptions=True,
        )

        failed = False
        aborted = False
        for media, result in zip(self.media, results):
            if isinstance(result, (PlaybackAbortedError, asyncio.CancelledError)):
                logger.debug("%s: play request aborted: %s", media.name, result)
                aborted = True
            elif isinstance(result, BaseException):
                logger.error("%s failed to play: %s", media.name, result)
                failed = True

        if not (failed or aborted):
            return True

        self._pause_all()
        self.state = SyncState.PAUSED
        if self._store.is_playing:
            self._store.pause()
        return False

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    def _start_loops(self) -> None:
        self._stop_loops()
        self._clock_task = self._loop.create_task(self._clock_loop())
        self._clock_task.add_done_callback(self._loop_done)
        if self._slave is not None:
            self._drift_task = self._loop.create_task(self._drift_loop())
            self._drift_task.add_done_callback(self._loop_done)

    def _stop_loops(self) -> None:
        for task in (self._clock_task, self._drift_task):
            if task is not None:
                task.cancel()
        self._clock_task = None
        self._drift_task = None

    async def _clock_loop(self) -> None:
        interval = 1.0 / max(1, self.config.clock_tick_hz)
        while True:
            if not self._pending_seeks and not self._master.paused:
                try:
                    self._write_clock(self._master.current_time)
                except Exception as exc:
                    logger.warning("Could not read %s position: %s", self._master.name, exc)
            await asyncio.sleep(interval)

    async def _drift_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.drift_check_interval_s)
            self.correct_drift()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        if self._loop is None:
            # Not started (or already closed)
            coro.close()
            return
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Synchronizer transition failed", exc_info=exc)

    @staticmethod
    def _loop_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Synchronizer loop stopped unexpectedly", exc_info=exc)

    def _write_clock(self, time: float) -> None:
        """Write the media position into the store without triggering a seek."""
        self._writing_clock = True
        try:
            self._store.set_current_time(time)
        finally:
            self._writing_clock = False

    def _pause_all(self) -> None:
        for media in self.media:
            if not media.paused:
                media.pause()

    @staticmethod
    def _set_position(media: PlayableMedia, time: float) -> None:
        try:
            media.current_time = time
        except Exception as exc:
            logger.warning("Could not move %s to %.3fs: %s", media.name, time, exc)
