"""Greedy segmentation of timed words into caption chunks.

WHY: A transcript arrives as one long run of timed words. Viewers need
short cues that start and stop with the speech. Breaking at sentence ends
and capping the cue length gives readable captions without any lookahead.

HOW: Single pass, O(n). Words are appended to a growing chunk; after each
append the chunk is closed when the word ends a sentence, the chunk is
full, or the word is the last one. Chunk timing is taken from its first
and last word.

RULES:
- A word "ends a sentence" when its text contains ".", "!" or "?"
- No chunk ever holds more than MAX_WORDS_PER_CHUNK words
- Chunks are contiguous and cover every input word in order
- Empty input returns an empty list (not an error)
- The same words always produce the same chunk boundaries
"""

from __future__ import annotations

from typing import List, Sequence

from video_subtitler.core.ir import CaptionChunk, Word

MAX_WORDS_PER_CHUNK = 8

# Characters that close the current chunk when they appear anywhere in a word.
_SENTENCE_TERMINALS = frozenset({".", "!", "?"})


def ends_sentence(text: str) -> bool:
    """Return True if the word text contains a sentence-terminal character."""
    return any(ch in _SENTENCE_TERMINALS for ch in text)


def chunk_words(
    words: Sequence[Word],
    max_words: int = MAX_WORDS_PER_CHUNK,
) -> List[CaptionChunk]:
    """Group an ordered word sequence into caption chunks.

    Args:
        words: Timed words in transcript order (possibly empty).
        max_words: Upper bound on words per chunk.

    Returns:
        Ordered list of CaptionChunk objects; empty if ``words`` is empty.
    """
    if max_words < 1:
        raise ValueError("max_words must be at least 1, got {}".format(max_words))

    chunks: List[CaptionChunk] = []
    current: List[Word] = []
    last_index = len(words) - 1

    for index, word in enumerate(words):
        current.append(word)

        if (
            ends_sentence(word.text)
            or len(current) >= max_words
            or index == last_index
        ):
            chunks.append(CaptionChunk(
                words=tuple(w.text for w in current),
                start=current[0].start,
                end=current[-1].end,
            ))
            current = []

    return chunks
