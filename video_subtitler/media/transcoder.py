"""FFmpeg invocations: HLS segmentation and audio-track extraction.

WHY: The player streams HLS, and the speech-recognition provider wants a
compact audio file. Both come from the same uploaded source via two
independent encoder runs per job.

HOW: Each run is an ``asyncio.create_subprocess_exec`` call with an
argument list (no shell, so paths with spaces or quotes are safe). The
child is wrapped in ``_reaped()``, which kills and waits for it if the
awaiting task is cancelled or otherwise leaves early.

RULES:
- Success means exit status zero; partial output is never inspected
- Launch failure or non-zero exit raises EncodingFailed (no retry)
- The child process is always reaped, including on cancellation
- HLS output: {out_dir}/index.m3u8 + segment%03d.ts, numbering from 0
- Audio output: {out_dir}/audio.mp3 (libmp3lame)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List

from video_subtitler.errors import EncodingFailed

logger = logging.getLogger(__name__)

MANIFEST_NAME = "index.m3u8"
SEGMENT_PATTERN = "segment%03d.ts"
AUDIO_NAME = "audio.mp3"

# Characters of encoder stderr kept in the error message.
_STDERR_TAIL_CHARS = 2000


@asynccontextmanager
async def _reaped(process: asyncio.subprocess.Process) -> AsyncIterator[asyncio.subprocess.Process]:
    """Kill and wait for ``process`` if the body exits before it finished."""
    try:
        yield process
    finally:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            logger.warning("Encoder process %s killed before completion", process.pid)


class MediaTranscoder:
    """Runs the external encoder for one job's source file."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", hls_segment_seconds: int = 10) -> None:
        self.ffmpeg_path = ffmpeg_path
        self.hls_segment_seconds = hls_segment_seconds

    def segment_command(self, source_path: Path, out_dir: Path) -> List[str]:
        return [
            self.ffmpeg_path, "-y",
            "-i", str(source_path),
            "-codec:v", "libx264",
            "-codec:a", "aac",
            "-hls_time", str(self.hls_segment_seconds),
            "-hls_playlist_type", "vod",
            "-hls_segment_filename", str(out_dir / SEGMENT_PATTERN),
            "-start_number", "0",
            str(out_dir / MANIFEST_NAME),
        ]

    def audio_command(self, source_path: Path, out_dir: Path) -> List[str]:
        return [
            self.ffmpeg_path, "-y",
            "-i", str(source_path),
            "-vn",
            "-acodec", "libmp3lame",
            str(out_dir / AUDIO_NAME),
        ]

    async def segment_for_streaming(self, source_path: Path, out_dir: Path) -> Path:
        """Encode the source into an HLS manifest plus numbered segments."""
        manifest = Path(out_dir) / MANIFEST_NAME
        await self._run(self.segment_command(Path(source_path), Path(out_dir)), "HLS conversion")
        logger.info("HLS conversion done: %s", manifest)
        return manifest

    async def extract_audio_track(self, source_path: Path, out_dir: Path) -> Path:
        """Extract the source's audio track as MP3."""
        audio = Path(out_dir) / AUDIO_NAME
        await self._run(self.audio_command(Path(source_path), Path(out_dir)), "Audio extraction")
        logger.info("Audio extracted: %s", audio)
        return audio

    async def _run(self, command: List[str], label: str) -> None:
        logger.debug("Running: %s", " ".join(command))
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise EncodingFailed("{} failed: could not start {}: {}".format(
                label, command[0], exc,
            )) from exc

        async with _reaped(process):
            _, stderr = await process.communicate()

        if process.returncode != 0:
            detail = (stderr or b"").decode("utf-8", errors="replace").strip()
            raise EncodingFailed("{} failed (exit status {}): {}".format(
                label, process.returncode, detail[-_STDERR_TAIL_CHARS:],
            ))
