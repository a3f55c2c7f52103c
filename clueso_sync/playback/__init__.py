"""Media playback synchronization.

WHY: Media elements run on their own clocks; this package reconciles
them with the shared clock and with each other.

HOW: media.py defines the playable-element interface and errors,
simulated.py an in-process element, sync_loop.py the drift-correcting
state machine, seek.py the click-to-seek translation.

RULES:
- Media elements never write the clock directly; the synchronizer does
"""

from clueso_sync.playback.media import MediaPlaybackError, PlayableMedia, PlaybackAbortedError
from clueso_sync.playback.seek import SeekDispatcher
from clueso_sync.playback.simulated import SimulatedMedia
from clueso_sync.playback.sync_loop import MediaSynchronizer, SyncConfig, SyncState

__all__ = [
    "MediaPlaybackError",
    "MediaSynchronizer",
    "PlayableMedia",
    "PlaybackAbortedError",
    "SeekDispatcher",
    "SimulatedMedia",
    "SyncConfig",
    "SyncState",
]
