"""Export formatter registry.

WHY: The CLI and HTTP layers need a single lookup to find the right
exporter by name.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["srt_captions"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and URLs)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from clueso_sync.formatters.alignment_json import AlignmentJSONFormatter
from clueso_sync.formatters.plain_text import PlainTextFormatter
from clueso_sync.formatters.srt_captions import SRTCaptionFormatter

if TYPE_CHECKING:
    from clueso_sync.formatters.base import BaseFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "alignment_json": AlignmentJSONFormatter,
    "plain_text": PlainTextFormatter,
    "srt_captions": SRTCaptionFormatter,
}
