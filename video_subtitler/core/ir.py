"""Intermediate representation dataclasses shared by every stage.

WHY: The transcription client, the chunker, the caption emitter, and the
orchestrator all exchange timed words, chunks, and results. One set of
typed, immutable dataclasses keeps those hand-offs explicit.

HOW: Frozen dataclasses, leaf-first:
  Word              — one recognised word with start/end seconds
  Transcript        — full text, ordered words, detected language
  CaptionChunk      — contiguous words destined for one cue
  Cue               — one numbered, timed caption entry ready to serialise
  CaptionPaths      — primary caption file and optional translated file
  TranslationResult — translated text plus an explicit success flag
  PipelineResult    — the final record returned once per job

RULES:
- All times are float seconds from the start of the media
- Word and chunk sequences are tuples (immutable once produced)
- CaptionChunk.start is its first word's start, end is its last word's end
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class Word:
    """A single recognised word with timing.

    RULES:
    - text may carry attached punctuation ("today?")
    - start <= end; start times are non-decreasing across a transcript
    """

    text: str
    start: float
    end: float


@dataclass(frozen=True)
class Transcript:
    """The normalised speech-recognition output for one job.

    RULES:
    - text is "" and words is () when the provider returned nothing
    - detected_language is never empty (falls back to a default code)
    """

    text: str
    words: Tuple[Word, ...]
    detected_language: str

    @property
    def word_count(self) -> int:
        return len(self.words)


@dataclass(frozen=True)
class CaptionChunk:
    """Contiguous transcript words shown together in one caption cue."""

    words: Tuple[str, ...]
    start: float
    end: float

    @property
    def text(self) -> str:
        return " ".join(self.words)


@dataclass(frozen=True)
class Cue:
    """One numbered, timed caption entry (1-based index)."""

    index: int
    start: float
    end: float
    text: str


@dataclass(frozen=True)
class CaptionPaths:
    """Caption files written for a job."""

    original: Path
    translated: Optional[Path] = None


@dataclass(frozen=True)
class TranslationResult:
    """Outcome of the translation fallback chain.

    WHY: Returning the bare string forces callers to compare it with the
    input to find out whether anything was translated, which misreports a
    text that legitimately translates to itself. The flag makes it explicit.

    RULES:
    - translated is True only when a provider returned a non-empty string
    - provider names the provider that succeeded, else None
    - when translated is False, text is the untouched input
    """

    text: str
    translated: bool
    provider: Optional[str] = None


@dataclass(frozen=True)
class PipelineResult:
    """Final, immutable record of a completed job."""

    job_id: str
    transcript: str
    translated_text: str
    translated: bool
    detected_language: str
    target_language: str
    media_stream_path: Path
    caption_paths: CaptionPaths
    word_count: int
