"""Caption formatter registry.

WHY: The CLI, the HTTP layer, and the config all refer to caption formats
by a short key. A central dict makes adding a format a one-line change.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["webvtt"]()``.

RULES:
- Keys are lowercase identifiers (used in CLI flags and CAPTION_FORMAT)
- Values are CaptionFormatter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from video_subtitler.formatters.srt import SRTFormatter
from video_subtitler.formatters.webvtt import WebVTTFormatter

if TYPE_CHECKING:
    from video_subtitler.formatters.base import CaptionFormatter

FORMATTERS: dict[str, type[CaptionFormatter]] = {
    "webvtt": WebVTTFormatter,
    "srt": SRTFormatter,
}


def get_formatter(key: str) -> CaptionFormatter:
    """Instantiate the formatter registered under ``key``.

    Raises ValueError naming the available keys when ``key`` is unknown.
    """
    try:
        return FORMATTERS[key]()
    except KeyError:
        available = ", ".join(sorted(FORMATTERS))
        raise ValueError(
            "Unknown caption format '{}'. Available formats: {}".format(key, available)
        ) from None
