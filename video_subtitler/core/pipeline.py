"""Per-job orchestration of the encode → transcribe → translate → caption stages.

WHY: Each stage depends on the output of the one before it: no audio
without a readable source, no transcript without audio, no captions
without a transcript. The orchestrator owns that ordering, the job's
working directory, and the single tagged failure reported to the caller.

HOW: A Job moves through a linear state machine

    CREATED → SEGMENTED → AUDIO_EXTRACTED → TRANSCRIBED → TRANSLATED
            → CAPTIONS_EMITTED → COMPLETED

with FAILED reachable from any non-terminal state. ``SubtitlePipeline.run``
awaits each stage in turn. A PipelineError from any stage marks the job
FAILED and is re-raised as PipelineFailed(stage, cause). Cancelling the
running task marks the job FAILED at the current stage and propagates.

RULES:
- One job runs its stages strictly in order; no state is ever re-entered
- No retry and no rollback: partial files stay in the working directory
- Working directory: {uploads_root}/courses/{job_id}, unique per job
- Translation never fails a job; the translated caption file is written
  only when a provider actually translated the text
- Collaborators (transcoder, transcriber, translator) are injectable
"""

from __future__ import annotations

import asyncio
import enum
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from video_subtitler.api.client import DeepgramClient
from video_subtitler.api.translation import TranslationChain, build_translation_chain
from video_subtitler.config import PipelineConfig
from video_subtitler.core.captions import emit_captions
from video_subtitler.core.chunker import chunk_words
from video_subtitler.core.ir import PipelineResult
from video_subtitler.errors import PipelineError, PipelineFailed
from video_subtitler.formatters import get_formatter
from video_subtitler.media.transcoder import MediaTranscoder

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]


class JobState(str, enum.Enum):
    """Lifecycle states of one job."""

    CREATED = "created"
    SEGMENTED = "segmented"
    AUDIO_EXTRACTED = "audio_extracted"
    TRANSCRIBED = "transcribed"
    TRANSLATED = "translated"
    CAPTIONS_EMITTED = "captions_emitted"
    COMPLETED = "completed"
    FAILED = "failed"


class Stage(str, enum.Enum):
    """Pipeline stages, named in failure reports."""

    SEGMENT = "segment"
    EXTRACT_AUDIO = "extract_audio"
    TRANSCRIBE = "transcribe"
    TRANSLATE = "translate"
    EMIT_CAPTIONS = "emit_captions"


_SUCCESS_PATH = [
    JobState.CREATED,
    JobState.SEGMENTED,
    JobState.AUDIO_EXTRACTED,
    JobState.TRANSCRIBED,
    JobState.TRANSLATED,
    JobState.CAPTIONS_EMITTED,
    JobState.COMPLETED,
]


@dataclass
class Job:
    """One upload-to-result processing unit.

    RULES:
    - id: UUID4 string generated at creation, also names output_dir
    - state only moves forward along the success path, or to FAILED
    - failure is set exactly when state is FAILED
    """

    id: str
    source_path: Path
    output_dir: Path
    target_language: str
    source_language: Optional[str] = None
    state: JobState = JobState.CREATED
    failure: Optional[PipelineFailed] = None
    result: Optional[PipelineResult] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (JobState.COMPLETED, JobState.FAILED)

    def advance(self, new_state: JobState) -> None:
        """Move to the next success-path state; anything else is a bug."""
        if self.is_terminal:
            raise RuntimeError("Job {} is already {}".format(self.id, self.state.value))
        expected = _SUCCESS_PATH[_SUCCESS_PATH.index(self.state) + 1]
        if new_state != expected:
            raise RuntimeError("Job {} cannot move from {} to {}".format(
                self.id, self.state.value, new_state.value,
            ))
        self.state = new_state

    def fail(self, stage: Stage, cause: BaseException) -> PipelineFailed:
        if self.is_terminal:
            raise RuntimeError("Job {} is already {}".format(self.id, self.state.value))
        self.failure = PipelineFailed(stage, cause)
        self.state = JobState.FAILED
        return self.failure


class SubtitlePipeline:
    """Runs all stages for one job at a time; safe to share across jobs.

    Args:
        config: Process-wide settings (uploads root, providers, formats).
        transcoder: Encoder wrapper; built from config when omitted.
        transcriber_factory: Zero-argument callable returning an async
            context manager with a ``transcribe()`` coroutine. Defaults to
            a DeepgramClient built from config.
        translator: Translation chain; the default three-provider chain
            when omitted.
    """

    def __init__(
        self,
        config: PipelineConfig,
        transcoder: Optional[MediaTranscoder] = None,
        transcriber_factory: Optional[Callable[[], Any]] = None,
        translator: Optional[TranslationChain] = None,
    ) -> None:
        self.config = config
        self.transcoder = transcoder or MediaTranscoder(
            ffmpeg_path=config.ffmpeg_path,
            hls_segment_seconds=config.hls_segment_seconds,
        )
        self._transcriber_factory = transcriber_factory or (
            lambda: DeepgramClient.from_config(config)
        )
        self.translator = translator or build_translation_chain(config)
        self.formatter = get_formatter(config.caption_format)

    def create_job(
        self,
        source_path: Path,
        target_language: Optional[str] = None,
        source_language: Optional[str] = None,
    ) -> Job:
        """Create a job with a fresh ID and its own working directory."""
        job_id = str(uuid.uuid4())
        output_dir = self.config.courses_root / job_id
        output_dir.mkdir(parents=True, exist_ok=False)

        job = Job(
            id=job_id,
            source_path=Path(source_path),
            output_dir=output_dir,
            target_language=target_language or self.config.default_target_language,
            source_language=source_language or None,
        )
        logger.info("Created job %s for %s in %s", job.id, job.source_path, output_dir)
        return job

    async def process(
        self,
        source_path: Path,
        target_language: Optional[str] = None,
        source_language: Optional[str] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> PipelineResult:
        """Create a job for ``source_path`` and run it to completion."""
        job = self.create_job(source_path, target_language, source_language)
        return await self.run(job, on_status=on_status)

    async def run(self, job: Job, on_status: Optional[StatusCallback] = None) -> PipelineResult:
        """Run every stage for ``job`` and return its result record.

        Raises:
            PipelineFailed: tagged with the failing stage; job.state is FAILED.
            asyncio.CancelledError: if the running task was cancelled.
        """
        if job.state != JobState.CREATED:
            raise RuntimeError("Job {} was already run (state: {})".format(job.id, job.state.value))

        def status(msg: str) -> None:
            logger.info("[%s] %s", job.id, msg)
            if on_status:
                on_status(msg)

        stage = Stage.SEGMENT
        try:
            status("Step 1/5: Converting video to HLS...")
            manifest = await self.transcoder.segment_for_streaming(job.source_path, job.output_dir)
            job.advance(JobState.SEGMENTED)

            stage = Stage.EXTRACT_AUDIO
            status("Step 2/5: Extracting audio...")
            audio = await self.transcoder.extract_audio_track(job.source_path, job.output_dir)
            job.advance(JobState.AUDIO_EXTRACTED)

            stage = Stage.TRANSCRIBE
            status("Step 3/5: Transcribing audio...")
            async with self._transcriber_factory() as transcriber:
                transcript = await transcriber.transcribe(
                    audio,
                    fallback_language=job.source_language,
                    on_status=on_status,
                )
            job.advance(JobState.TRANSCRIBED)
            status("  {} words, detected language: {}".format(
                transcript.word_count, transcript.detected_language,
            ))

            stage = Stage.TRANSLATE
            status("Step 4/5: Translating transcript to {}...".format(job.target_language))
            translation = await self.translator.translate(
                transcript.text,
                transcript.detected_language,
                job.target_language,
            )
            job.advance(JobState.TRANSLATED)
            if translation.translated:
                status("  Translated with {}".format(translation.provider))
            else:
                status("  No translation applied")

            stage = Stage.EMIT_CAPTIONS
            status("Step 5/5: Generating subtitle files...")
            chunks = chunk_words(transcript.words)
            caption_paths = emit_captions(
                chunks,
                job.output_dir,
                translated_text=translation.text if translation.translated else None,
                formatter=self.formatter,
            )
            job.advance(JobState.CAPTIONS_EMITTED)

        except PipelineError as exc:
            failure = job.fail(stage, exc)
            logger.error("Job %s failed at %s: %s", job.id, stage.value, exc)
            raise failure from exc
        except asyncio.CancelledError as exc:
            job.fail(stage, exc)
            logger.warning("Job %s cancelled during %s", job.id, stage.value)
            raise
        except Exception as exc:
            job.fail(stage, exc)
            logger.exception("Job %s crashed during %s", job.id, stage.value)
            raise

        result = PipelineResult(
            job_id=job.id,
            transcript=transcript.text,
            translated_text=translation.text,
            translated=translation.translated,
            detected_language=transcript.detected_language,
            target_language=job.target_language,
            media_stream_path=manifest,
            caption_paths=caption_paths,
            word_count=transcript.word_count,
        )
        job.result = result
        job.advance(JobState.COMPLETED)
        status("Done! {} caption file(s) in {}".format(
            2 if caption_paths.translated else 1, job.output_dir,
        ))
        return result
