"""Deepgram pre-recorded transcription response parsing.

WHY: The provider response is a deeply nested JSON object in which any
level may be missing (silent audio, unsupported language). The pipeline
needs a flat, typed Transcript and must not crash on an empty result.

HOW: ``ListenResponse.from_dict`` walks ``results.channels[0]`` and its
first alternative defensively, then ``to_transcript`` normalises words and
language into the shared IR.

RULES:
- Missing results/channels/alternatives -> empty transcript, no words
- Each word uses ``punctuated_word`` when present, else ``word``
- Words missing start or end timing are dropped
- Missing/empty detected_language -> caller-supplied fallback code
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from video_subtitler.core.ir import Transcript, Word


@dataclass
class ListenWord:
    """A single word entry from ``alternatives[0].words``."""

    word: str
    start: float
    end: float
    confidence: Optional[float] = None
    punctuated_word: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional[ListenWord]:
        """Parse one word dict; returns None for entries without timing."""
        text = data.get("word")
        start = data.get("start")
        end = data.get("end")
        if text is None or start is None or end is None:
            return None
        return cls(
            word=str(text),
            start=float(start),
            end=float(end),
            confidence=data.get("confidence"),
            punctuated_word=data.get("punctuated_word"),
        )

    @property
    def display_text(self) -> str:
        return self.punctuated_word or self.word


@dataclass
class ListenResponse:
    """The parts of ``POST /v1/listen`` the pipeline consumes."""

    transcript: str = ""
    words: List[ListenWord] = field(default_factory=list)
    detected_language: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> ListenResponse:
        if not isinstance(data, dict):
            return cls()
        results = data.get("results") or {}
        channels = results.get("channels") or []
        if not channels:
            return cls()

        channel = channels[0] or {}
        alternatives = channel.get("alternatives") or []
        alternative = alternatives[0] if alternatives else {}

        words: List[ListenWord] = []
        for raw in alternative.get("words") or []:
            parsed = ListenWord.from_dict(raw)
            if parsed is not None:
                words.append(parsed)

        return cls(
            transcript=alternative.get("transcript") or "",
            words=words,
            detected_language=channel.get("detected_language") or None,
        )

    def to_transcript(self, fallback_language: str) -> Transcript:
        return Transcript(
            text=self.transcript,
            words=tuple(Word(text=w.display_text, start=w.start, end=w.end) for w in self.words),
            detected_language=self.detected_language or fallback_language,
        )
