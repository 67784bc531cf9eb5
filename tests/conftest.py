"""Shared test fixtures for the video_subtitler test suite.

WHY: The chunker, emitter, transcription client, and orchestrator tests all
need the same timed words and provider payloads. Centralising them keeps
every test working from one known-good sample.

HOW: Pytest fixtures provide a sample provider response, matching Word
tuples, a PipelineConfig rooted in tmp_path, and fake collaborators
(transcoder, transcriber, translator) for orchestrator tests.

RULES:
- No fixture touches the network or launches ffmpeg
- Fake collaborators record their calls so tests can assert ordering
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from video_subtitler.config import PipelineConfig
from video_subtitler.core.ir import Transcript, TranslationResult, Word
from video_subtitler.errors import PipelineError

# ---------------------------------------------------------------------------
# Sample provider payload
# ---------------------------------------------------------------------------

SAMPLE_WORDS: List[Dict[str, Any]] = [
    {"word": "hello",    "start": 0.08, "end": 0.40, "confidence": 0.99, "punctuated_word": "Hello"},
    {"word": "everyone", "start": 0.40, "end": 0.90, "confidence": 0.98, "punctuated_word": "everyone."},
    {"word": "today",    "start": 1.10, "end": 1.40, "confidence": 0.97, "punctuated_word": "Today"},
    {"word": "we",       "start": 1.40, "end": 1.52, "confidence": 0.99, "punctuated_word": "we"},
    {"word": "learn",    "start": 1.52, "end": 1.80, "confidence": 0.96, "punctuated_word": "learn"},
    {"word": "python",   "start": 1.80, "end": 2.30, "confidence": 0.95, "punctuated_word": "Python!"},
]


@pytest.fixture
def deepgram_response() -> Dict[str, Any]:
    """A provider response with a detected language and punctuated words."""
    return {
        "metadata": {"request_id": "f2b5c3d4-0000-4000-8000-000000000001"},
        "results": {
            "channels": [
                {
                    "detected_language": "en",
                    "alternatives": [
                        {
                            "transcript": "Hello everyone. Today we learn Python!",
                            "confidence": 0.98,
                            "words": [dict(w) for w in SAMPLE_WORDS],
                        }
                    ],
                }
            ]
        },
    }


@pytest.fixture
def sample_words() -> List[Word]:
    """Word objects matching SAMPLE_WORDS (punctuated text)."""
    return [Word(text=w["punctuated_word"], start=w["start"], end=w["end"]) for w in SAMPLE_WORDS]


@pytest.fixture
def nine_plain_words() -> List[Word]:
    """Nine unpunctuated words starting at 0.0, 0.4, ... 3.2 seconds."""
    return [
        Word(text="w{}".format(i), start=round(i * 0.4, 1), end=round(i * 0.4 + 0.3, 1))
        for i in range(9)
    ]


@pytest.fixture
def config(tmp_path: Path) -> PipelineConfig:
    """Config rooted in tmp_path with a fake credential."""
    return PipelineConfig(
        deepgram_api_key="test-key",
        uploads_root=tmp_path / "uploads",
        base_url="http://testserver",
        translation_timeout_s=0.5,
    )


# ---------------------------------------------------------------------------
# Fake collaborators for orchestrator tests
# ---------------------------------------------------------------------------


class FakeTranscoder:
    """Writes placeholder outputs instead of running ffmpeg."""

    def __init__(self, calls: List[str], fail_on: Optional[str] = None,
                 error: Optional[BaseException] = None) -> None:
        self.calls = calls
        self.fail_on = fail_on
        self.error = error

    async def segment_for_streaming(self, source_path: Path, out_dir: Path) -> Path:
        self.calls.append("segment")
        if self.fail_on == "segment":
            raise self.error
        manifest = out_dir / "index.m3u8"
        manifest.write_text("#EXTM3U\n", encoding="utf-8")
        return manifest

    async def extract_audio_track(self, source_path: Path, out_dir: Path) -> Path:
        self.calls.append("extract_audio")
        if self.fail_on == "extract_audio":
            raise self.error
        audio = out_dir / "audio.mp3"
        audio.write_bytes(b"ID3fake")
        return audio


class FakeTranscriber:
    """Async context manager returning a fixed transcript."""

    def __init__(self, calls: List[str], transcript: Optional[Transcript] = None,
                 error: Optional[PipelineError] = None) -> None:
        self.calls = calls
        self.transcript = transcript
        self.error = error
        self.fallback_language: Optional[str] = None

    async def __aenter__(self) -> FakeTranscriber:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def transcribe(self, audio_path: Path, fallback_language=None, on_status=None) -> Transcript:
        self.calls.append("transcribe")
        self.fallback_language = fallback_language
        if self.error is not None:
            raise self.error
        return self.transcript


class FakeTranslator:
    """Returns a canned TranslationResult and records its arguments."""

    def __init__(self, calls: List[str], result: Optional[TranslationResult] = None) -> None:
        self.calls = calls
        self.result = result
        self.args = None

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        self.calls.append("translate")
        self.args = (text, source_lang, target_lang)
        if self.result is None:
            return TranslationResult(text=text, translated=False)
        return self.result
