"""Async HTTP client for the Deepgram pre-recorded speech-to-text API.

WHY: The pipeline needs one timed transcript per job. This module hides the
provider's HTTP details and maps every way the call can go wrong onto a
single fatal TranscriptionUnavailable, so the orchestrator has one thing
to catch.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. DeepgramClient is an
async context manager. Enter it to get an authenticated client, exit to
close the connection pool. ``transcribe()`` posts the raw audio bytes with
fixed request options and normalises the response via api/models.py.

RULES:
- Always use the async context manager (async with DeepgramClient(...) as client:)
- Request options are fixed: smart_format, punctuate, detect_language and
  utterances on; diarize off
- No credential, transport error, timeout, non-2xx, non-JSON or malformed body all
  raise TranscriptionUnavailable (no retry, no fallback provider)
- An absent result is normalised to an empty transcript, not an error
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import httpx

from video_subtitler.api.models import ListenResponse
from video_subtitler.config import DEEPGRAM_BASE_URL, PipelineConfig
from video_subtitler.core.ir import Transcript
from video_subtitler.errors import TranscriptionUnavailable

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

LISTEN_OPTIONS = {
    "smart_format": "true",
    "punctuate": "true",
    "detect_language": "true",
    "diarize": "false",
    "utterances": "true",
}

_AUDIO_CONTENT_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
}


class DeepgramClient:
    """Async client for the Deepgram ``/listen`` endpoint.

    RULES:
    - Use as: async with DeepgramClient(api_key=...) as client: ...
    - api_key may be None; transcribe() then fails with TranscriptionUnavailable
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout_s: float = 300.0,
        default_language: str = "en",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = (base_url or DEEPGRAM_BASE_URL).rstrip("/")
        self._timeout_s = timeout_s
        self._default_language = default_language
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> DeepgramClient:
        return cls(
            api_key=config.deepgram_api_key,
            base_url=config.deepgram_base_url,
            timeout_s=config.transcription_timeout_s,
            default_language=config.default_source_language,
            transport=transport,
        )

    async def __aenter__(self) -> DeepgramClient:
        headers = {}
        if self._api_key:
            headers["Authorization"] = "Token {}".format(self._api_key)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=httpx.Timeout(self._timeout_s, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "DeepgramClient must be used as an async context manager: "
                "async with DeepgramClient(...) as client: ..."
            )
        return self._client

    async def transcribe(
        self,
        audio_path: Path,
        fallback_language: Optional[str] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> Transcript:
        """Send the audio file to the provider and return a normalised Transcript.

        Args:
            audio_path: Extracted audio track for the job.
            fallback_language: Language to report when the provider detects
                none; defaults to the client's configured default.
            on_status: Optional callback for status updates.

        Raises:
            TranscriptionUnavailable: on any provider or credential failure.
        """
        client = self._ensure_client()
        if not self._api_key:
            raise TranscriptionUnavailable(
                "Speech-recognition API key not configured. "
                "Add DEEPGRAM_API_KEY to the .env file."
            )

        audio_path = Path(audio_path)
        try:
            audio = audio_path.read_bytes()
        except OSError as exc:
            raise TranscriptionUnavailable(
                "Could not read audio file {}: {}".format(audio_path, exc)
            ) from exc

        if on_status:
            on_status("Transcribing {} ({:,} bytes)...".format(audio_path.name, len(audio)))

        content_type = _AUDIO_CONTENT_TYPES.get(audio_path.suffix.lower(), "application/octet-stream")
        try:
            resp = await client.post(
                "/listen",
                content=audio,
                params=LISTEN_OPTIONS,
                headers={"Content-Type": content_type},
            )
        except httpx.TimeoutException as exc:
            raise TranscriptionUnavailable("Transcription request timed out") from exc
        except httpx.HTTPError as exc:
            raise TranscriptionUnavailable("Transcription request failed: {}".format(exc)) from exc

        if resp.status_code != 200:
            raise TranscriptionUnavailable(
                "Speech-recognition provider error {}: {}".format(resp.status_code, resp.text)
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise TranscriptionUnavailable("Provider returned a non-JSON body") from exc

        try:
            transcript = ListenResponse.from_dict(payload).to_transcript(
                fallback_language or self._default_language
            )
        except (ValueError, TypeError, AttributeError) as exc:
            raise TranscriptionUnavailable(
                "Provider returned a malformed response: {}".format(exc)
            ) from exc
        logger.info(
            "Transcribed %s: %d words, detected language %s",
            audio_path.name,
            transcript.word_count,
            transcript.detected_language,
        )
        return transcript
