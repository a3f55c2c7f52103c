"""Pure timing functions and the data model.

WHY: Estimation and lookup are the algorithmic heart of the sync core and
must be testable without any clock, event loop, or media element.

HOW: ir.py defines the data structures, estimator.py turns text into
durations and word spans, locator.py answers "which slide / which word"
for a time and lays slides out, validation.py guards TTS results.

RULES:
- Nothing in this package holds mutable state
- Degenerate input yields degenerate-but-valid output, never an exception
"""
