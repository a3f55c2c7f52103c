"""Shared clock store and its derived-state observers.

WHY: Playback position and play state need exactly one owner that every
media element and UI component agrees on.

HOW: store.py holds the state container and its selector subscriptions;
observers.py derives active-word and playhead values from it.

RULES:
- Mutations go through ClockStore actions only
"""

from clueso_sync.clock.store import ClockState, ClockStore, SlideNotFoundError

__all__ = ["ClockState", "ClockStore", "SlideNotFoundError"]
