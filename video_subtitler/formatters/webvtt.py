"""WebVTT caption formatter.

WHY: HLS players (hls.js, Safari) load WebVTT text tracks natively, so this
is the default format served next to the stream manifest.

HOW: A ``WEBVTT`` header and blank line, then per cue the 1-based index,
``start --> end`` with ``.`` millisecond separators, the cue text, and a
blank separator line.

RULES:
- Empty cue text still produces a block (index, timing, empty line)
- Zero cues produce the header alone
"""

from typing import List

from video_subtitler.core.ir import Cue
from video_subtitler.core.timecode import format_time
from video_subtitler.formatters.base import CaptionFormatter

WEBVTT_HEADER = "WEBVTT"


class WebVTTFormatter(CaptionFormatter):
    """Formatter that produces a WebVTT text track."""

    @property
    def name(self) -> str:
        return "WebVTT"

    @property
    def extension(self) -> str:
        return ".vtt"

    def format(self, cues: List[Cue]) -> str:
        parts = [WEBVTT_HEADER + "\n\n"]
        for cue in cues:
            parts.append("{}\n{} --> {}\n{}\n\n".format(
                cue.index,
                format_time(cue.start),
                format_time(cue.end),
                cue.text,
            ))
        return "".join(parts)
