"""Configuration defaults, language mappings, and .env loading.

WHY: API credentials, provider URLs, and the uploads root are process-wide
values. Reading them from the environment deep inside a stage makes the
pipeline impossible to test with fake providers. Instead everything is
collected once into a PipelineConfig that is handed to each component.

HOW: python-dotenv loads the .env file on import. PipelineConfig.from_env()
reads the environment at call time, so tests can monkeypatch variables and
build a fresh config. Language codes and accepted upload extensions are
plain module-level data.

RULES:
- Components receive values through constructors, never via os.getenv
- DEEPGRAM_API_KEY is optional here; its absence fails the transcribe stage
- Unknown language codes pass through normalize_language() unchanged
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Languages offered to uploaders
# ---------------------------------------------------------------------------

LANGUAGE_MAP: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "hi": "Hindi",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "pt": "Portuguese",
    "ru": "Russian",
    "ar": "Arabic",
    "it": "Italian",
}


def normalize_language(code: Optional[str]) -> str:
    """Reduce a language tag to the two-letter code translation providers expect.

    RULES:
    - "en-US" / "en_us" -> "en" when the primary subtag is a known language
    - Unknown codes are returned lowercased but otherwise unchanged
    - None or blank returns ""
    """
    if not code or not code.strip():
        return ""
    cleaned = code.strip().lower().replace("_", "-")
    primary = cleaned.split("-", 1)[0]
    if primary in LANGUAGE_MAP:
        return primary
    return cleaned


# ---------------------------------------------------------------------------
# Accepted upload extensions
# ---------------------------------------------------------------------------

SUPPORTED_VIDEO_FORMATS: set[str] = {
    ".mp4", ".mov", ".mkv", ".webm", ".avi", ".m4v", ".mpeg", ".mpg",
}
"""Video file extensions accepted for upload (lowercase, with dot)."""

# ---------------------------------------------------------------------------
# Provider defaults
# ---------------------------------------------------------------------------

DEEPGRAM_BASE_URL = "https://api.deepgram.com/v1"
LIBRETRANSLATE_URL = "https://libretranslate.de/translate"
MYMEMORY_URL = "https://api.mymemory.translated.net/get"
LINGVA_URL = "https://lingva.ml/api/v1"

DEFAULT_PORT = 8000


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError("{} must be a number, got {!r}".format(name, raw))


@dataclass(frozen=True)
class PipelineConfig:
    """Everything the pipeline needs from the outside world.

    WHY: One explicit object instead of ambient environment lookups, so a
    test can point every provider at a fake and every file at tmp_path.

    RULES:
    - uploads_root holds raw uploads and courses/{job_id} working directories
    - base_url is only used to build public links, never by the core stages
    - caption_format must be a key of formatters.FORMATTERS
    """

    deepgram_api_key: Optional[str] = None
    deepgram_base_url: str = DEEPGRAM_BASE_URL
    libretranslate_url: str = LIBRETRANSLATE_URL
    mymemory_url: str = MYMEMORY_URL
    lingva_url: str = LINGVA_URL
    uploads_root: Path = Path("uploads")
    base_url: str = "http://localhost:{}".format(DEFAULT_PORT)
    port: int = DEFAULT_PORT
    ffmpeg_path: str = "ffmpeg"
    hls_segment_seconds: int = 10
    translation_timeout_s: float = 10.0
    transcription_timeout_s: float = 300.0
    default_target_language: str = "en"
    default_source_language: str = "en"
    caption_format: str = "webvtt"

    @property
    def courses_root(self) -> Path:
        """Parent directory of every job's working directory."""
        return self.uploads_root / "courses"

    @classmethod
    def from_env(cls) -> PipelineConfig:
        """Build a config from environment variables (populated by python-dotenv).

        RULES:
        - Blank variables count as unset
        - BASE_URL defaults to http://localhost:{PORT}
        - Raises ValueError for non-numeric timeouts or segment lengths
        """
        port = os.getenv("PORT", "").strip() or str(DEFAULT_PORT)
        return cls(
            deepgram_api_key=os.getenv("DEEPGRAM_API_KEY", "").strip() or None,
            deepgram_base_url=os.getenv("DEEPGRAM_BASE_URL", "").strip() or DEEPGRAM_BASE_URL,
            libretranslate_url=os.getenv("LIBRETRANSLATE_URL", "").strip() or LIBRETRANSLATE_URL,
            mymemory_url=os.getenv("MYMEMORY_URL", "").strip() or MYMEMORY_URL,
            lingva_url=os.getenv("LINGVA_URL", "").strip() or LINGVA_URL,
            uploads_root=Path(os.getenv("UPLOADS_ROOT", "").strip() or "uploads"),
            base_url=(
                os.getenv("BASE_URL", "").strip() or "http://localhost:{}".format(port)
            ).rstrip("/"),
            port=int(port),
            ffmpeg_path=os.getenv("FFMPEG_PATH", "").strip() or "ffmpeg",
            hls_segment_seconds=int(_env_float("HLS_SEGMENT_SECONDS", 10)),
            translation_timeout_s=_env_float("TRANSLATION_TIMEOUT_S", 10.0),
            transcription_timeout_s=_env_float("TRANSCRIPTION_TIMEOUT_S", 300.0),
            default_target_language=os.getenv("DEFAULT_TARGET_LANGUAGE", "").strip() or "en",
            default_source_language=os.getenv("DEFAULT_SOURCE_LANGUAGE", "").strip() or "en",
            caption_format=os.getenv("CAPTION_FORMAT", "").strip().lower() or "webvtt",
        )
