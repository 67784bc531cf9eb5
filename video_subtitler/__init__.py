"""Video Subtitler — upload-to-captions processing pipeline.

WHY: An uploaded lesson video is useless to a viewer who cannot follow the
spoken language. This package turns one upload into a streamable HLS
encoding plus time-aligned subtitle files, optionally machine-translated.

HOW: Five ordered stages: encode (HLS segments), extract audio, transcribe
(speech-recognition provider), translate (fallback chain of free providers),
chunk-and-emit captions. The orchestrator in core/pipeline.py runs them
strictly in order for one job and stops at the first fatal failure.

RULES:
- Every stage is independently testable with fake collaborators
- Translation is best-effort; every other stage failure is fatal to the job
- The pipeline never deletes job data (retention is the caller's concern)
"""

__version__ = "0.1.0"
