"""Caption file emission, including proportional re-split of translated text.

WHY: The source-language captions get their timing from the words that
make up each chunk. Machine-translated text has no timing at all, so the
translated track borrows the source chunk time ranges and spreads the
translated words over them in equal slices. This is an approximation, and
a deliberate one: it keeps the two tracks cue-for-cue aligned.

HOW: Chunks become Cue objects (1-based index, chunk timing, joined
words). If translated text is supplied, it is split on whitespace and cut
into ``ceil(len(words) / chunk_count)``-sized contiguous slices, one per
chunk. Both cue lists are serialised with the configured formatter and
written into the job's output directory.

RULES:
- Primary file: subtitles{ext}; translated file: subtitles-translated{ext}
- The translated file has exactly one cue per chunk, in chunk order
- Trailing translated cues may be empty when there are few translated words
- Zero chunks: header-only primary file, never a translated file
- Any OSError while writing raises CaptionWriteFailed
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import List, Optional, Sequence

from video_subtitler.core.ir import CaptionChunk, CaptionPaths, Cue
from video_subtitler.errors import CaptionWriteFailed
from video_subtitler.formatters import get_formatter
from video_subtitler.formatters.base import CaptionFormatter

logger = logging.getLogger(__name__)

PRIMARY_STEM = "subtitles"
TRANSLATED_STEM = "subtitles-translated"


def split_translated_words(text: str, chunk_count: int) -> List[List[str]]:
    """Partition translated text into ``chunk_count`` contiguous word slices.

    RULES:
    - Words are split on any whitespace
    - Slice size is ceil(len(words) / chunk_count)
    - Always returns exactly chunk_count slices (some may be empty)
    - chunk_count == 0 returns []
    """
    if chunk_count <= 0:
        return []
    words = text.split()
    size = math.ceil(len(words) / chunk_count)
    return [words[i * size:(i + 1) * size] for i in range(chunk_count)]


def build_cues(chunks: Sequence[CaptionChunk]) -> List[Cue]:
    """One cue per chunk, carrying the chunk's own words."""
    return [
        Cue(index=i, start=chunk.start, end=chunk.end, text=chunk.text)
        for i, chunk in enumerate(chunks, start=1)
    ]


def build_translated_cues(chunks: Sequence[CaptionChunk], translated_text: str) -> List[Cue]:
    """One cue per chunk, timing from the chunk, words from the translation."""
    slices = split_translated_words(translated_text, len(chunks))
    return [
        Cue(index=i, start=chunk.start, end=chunk.end, text=" ".join(words))
        for i, (chunk, words) in enumerate(zip(chunks, slices), start=1)
    ]


def _write(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CaptionWriteFailed("Could not write caption file {}: {}".format(path, exc)) from exc


def emit_captions(
    chunks: Sequence[CaptionChunk],
    output_dir: Path,
    translated_text: Optional[str] = None,
    formatter: Optional[CaptionFormatter] = None,
) -> CaptionPaths:
    """Write the primary caption file and, optionally, the translated one.

    Args:
        chunks: Caption chunks from the chunker, in order.
        output_dir: The job's working directory (must already exist).
        translated_text: Whole translated transcript, or None to skip the
            second file.
        formatter: Caption format to write; WebVTT when omitted.

    Returns:
        CaptionPaths with the primary path and the translated path (or None).

    Raises:
        CaptionWriteFailed: if either file cannot be written.
    """
    formatter = formatter or get_formatter("webvtt")
    output_dir = Path(output_dir)

    primary_path = output_dir / (PRIMARY_STEM + formatter.extension)
    _write(primary_path, formatter.format(build_cues(chunks)))
    logger.info("Wrote %d %s cues to %s", len(chunks), formatter.name, primary_path)

    if translated_text is None:
        return CaptionPaths(original=primary_path)

    if not chunks:
        logger.info("No caption chunks; skipping translated caption file")
        return CaptionPaths(original=primary_path)

    translated_path = output_dir / (TRANSLATED_STEM + formatter.extension)
    _write(translated_path, formatter.format(build_translated_cues(chunks, translated_text)))
    logger.info("Wrote translated %s captions to %s", formatter.name, translated_path)

    return CaptionPaths(original=primary_path, translated=translated_path)
