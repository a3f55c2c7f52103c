"""Abstract base formatter and output container.

WHY: Every export consumes the same laid-out Timeline but produces
different file content. This base class enforces a consistent interface
so the CLI and HTTP layers can work with any formatter generically.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list; most formatters return one item
- ``suffix`` starts with a hyphen, e.g. ``"-alignment.json"``
- Word times in exports are global unless the format says otherwise
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from clueso_sync.core.ir import Timeline


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the project stem,
                e.g. ``"-captions.srt"`` → ``"demo-captions.srt"``.
        content: The file content.
        media_type: MIME type for the content.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all timeline exporters.

    A new export format is one module in formatters/ holding a subclass
    with ``name`` and ``format()``, plus a key in FORMATTERS. Constructor
    arguments need defaults: the CLI and HTTP layers call ``cls()``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SRT Captions'."""

    @abstractmethod
    def format(self, timeline: Timeline) -> List[FormatterOutput]:
        """Convert the laid-out timeline into one or more output files."""
