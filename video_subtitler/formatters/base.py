"""Abstract base caption formatter.

WHY: The emitter writes the same cue list in whichever subtitle format the
deployment asks for. A shared interface lets it stay format-agnostic.

HOW: CaptionFormatter is an ABC with a ``name``, the output file
``extension``, and a ``format()`` method that serialises a list of Cue
objects into file content.

RULES:
- Subclasses MUST implement ``name``, ``extension`` and ``format()``
- ``extension`` starts with a dot, e.g. ``".vtt"``
- ``format()`` emits every cue it is given, including empty-bodied ones
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from video_subtitler.core.ir import Cue


class CaptionFormatter(ABC):
    """Abstract base for all caption formatters.

    To add a new caption format:
    1. Create a new file in formatters/
    2. Subclass CaptionFormatter
    3. Implement name, extension and format()
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'WebVTT'."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension including the dot, e.g. '.vtt'."""

    @abstractmethod
    def format(self, cues: List[Cue]) -> str:
        """Serialise cues into the complete file content."""
