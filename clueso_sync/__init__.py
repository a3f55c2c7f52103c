"""Clueso Sync — narration alignment and media synchronization core.

WHY: A narrated screen recording has three independently clocked parts:
the muted video, a separately generated voice-over, and an interactive
transcript whose words highlight as they are spoken. Without a shared
clock and continuous reconciliation these drift apart within seconds.

HOW: Four layers, leaf-first:
  core      — pure functions: duration/alignment estimation, active-word
              and slide lookup, TTS-result validation
  clock     — the shared clock store (single owner of playback position)
              plus observers that derive highlight/playhead state from it
  playback  — playable media abstraction, the drift-correcting
              synchronization loop, and the click-to-seek dispatcher
  formatters / server / cli — export, HTTP and terminal surfaces

RULES:
- The clock store is the only mutable owner of position and play state
- Media elements and UI observers mutate it only through its actions
- Core functions never raise on degenerate input (empty text, zero duration)
"""

__version__ = "0.1.0"
