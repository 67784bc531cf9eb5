"""SubRip (SRT) caption formatter.

WHY: Editing tools and desktop players that ignore WebVTT still accept
SRT. Same cue blocks, different timestamp separator and no header.

RULES:
- Timestamps use "," before the milliseconds (00:00:01,250)
- No header line; the file starts with cue 1
"""

from typing import List

from video_subtitler.core.ir import Cue
from video_subtitler.core.timecode import format_time
from video_subtitler.formatters.base import CaptionFormatter


class SRTFormatter(CaptionFormatter):
    """Formatter that produces a SubRip subtitle file."""

    @property
    def name(self) -> str:
        return "SRT"

    @property
    def extension(self) -> str:
        return ".srt"

    def format(self, cues: List[Cue]) -> str:
        return "".join(
            "{}\n{} --> {}\n{}\n\n".format(
                cue.index,
                format_time(cue.start, separator=","),
                format_time(cue.end, separator=","),
                cue.text,
            )
            for cue in cues
        )
