"""Fatal stage errors and the tagged pipeline failure.

WHY: A failed job must tell its caller which stage broke and why. Stage
components raise typed errors; the orchestrator tags them with the stage
and surfaces a single PipelineFailed to the caller.

RULES:
- EncodingFailed, TranscriptionUnavailable, CaptionWriteFailed are fatal
- Translation has no error type: every translation outcome is a success
- The underlying exception is chained with ``raise ... from ...``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from video_subtitler.core.pipeline import Stage


class PipelineError(Exception):
    """Base class for errors that abort a job."""


class EncodingFailed(PipelineError):
    """The external encoder could not be launched or exited non-zero."""


class TranscriptionUnavailable(PipelineError):
    """The speech-recognition provider errored, timed out, or has no credential."""


class CaptionWriteFailed(PipelineError):
    """A caption file could not be written."""


class PipelineFailed(Exception):
    """Terminal failure of one job, tagged with the stage that failed.

    RULES:
    - stage is the Stage that was running when the job failed
    - cause is the PipelineError (or CancelledError) that ended the job
    """

    def __init__(self, stage: Stage, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__("{} stage failed: {}".format(stage.value, str(cause) or type(cause).__name__))
