"""FastAPI application: video upload, processing, and static file serving.

WHY: The browser front-end uploads a lesson video and gets back stream and
caption URLs it can hand straight to the player. This module is the thin
HTTP wrapper around SubtitlePipeline: it saves the upload, runs the job,
and turns result paths into public links.

HOW: ``create_app()`` builds a FastAPI app around a PipelineConfig and a
SubtitlePipeline (both injectable for tests). POST /upload saves the
multipart file under the uploads root, awaits the pipeline, and returns a
ProcessedVideoResponse. The uploads root is mounted at /uploads so the
HLS manifest, segments, and caption files are directly fetchable.

RULES:
- Missing or unsupported upload -> 400 with ErrorResponse body
- PipelineFailed -> 500 with the failing stage and cause
- Public URLs are {base_url}/uploads/{path relative to uploads root}
- CORS allows the two local front-end dev origins
"""

import logging
import shutil
import uuid
from pathlib import Path
from typing import Annotated, Optional

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from video_subtitler import __version__
from video_subtitler.config import LANGUAGE_MAP, SUPPORTED_VIDEO_FORMATS, PipelineConfig
from video_subtitler.core.ir import PipelineResult
from video_subtitler.core.pipeline import SubtitlePipeline
from video_subtitler.errors import PipelineFailed
from video_subtitler.server.models import (
    ErrorResponse,
    HealthResponse,
    LanguagesResponse,
    ProcessedVideoResponse,
)

logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def public_url(config: PipelineConfig, path: Path) -> str:
    """Map a file under the uploads root to its public /uploads URL."""
    relative = Path(path).relative_to(config.uploads_root)
    return "{}/uploads/{}".format(config.base_url.rstrip("/"), relative.as_posix())


def result_to_response(config: PipelineConfig, result: PipelineResult) -> ProcessedVideoResponse:
    translated_path = result.caption_paths.translated
    return ProcessedVideoResponse(
        lessonId=result.job_id,
        videoUrl=public_url(config, result.media_stream_path),
        subtitleUrl=public_url(config, result.caption_paths.original),
        translatedSubtitleUrl=public_url(config, translated_path) if translated_path else None,
        transcript=result.transcript,
        translatedText=result.translated_text,
        translated=result.translated,
        originalLang=result.detected_language,
        targetLang=result.target_language,
        wordCount=result.word_count,
    )


def _error(status_code: int, error: str, stage: Optional[str] = None, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, stage=stage, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _save_upload(upload: UploadFile, uploads_root: Path) -> Path:
    """Store the uploaded file as file-{uuid}{ext} under the uploads root."""
    ext = Path(upload.filename or "").suffix.lower()
    uploads_root.mkdir(parents=True, exist_ok=True)
    destination = uploads_root / "file-{}{}".format(uuid.uuid4(), ext)
    with open(destination, "wb") as out:
        shutil.copyfileobj(upload.file, out)
    return destination


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(
    config: Optional[PipelineConfig] = None,
    pipeline: Optional[SubtitlePipeline] = None,
) -> FastAPI:
    """Build the FastAPI app around a config and pipeline."""
    config = config or PipelineConfig.from_env()
    pipeline = pipeline or SubtitlePipeline(config)

    app = FastAPI(
        title="Video Subtitler API",
        description=(
            "Upload a video to get an HLS stream, a timed transcript, and "
            "WebVTT subtitles, optionally machine-translated."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.config = config
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount(
        "/uploads",
        StaticFiles(directory=str(config.uploads_root), check_dir=False),
        name="uploads",
    )

    @app.get("/", tags=["health"], summary="Service banner")
    async def root() -> dict:
        return {"message": "Video Streaming API with Transcription & Translation"}

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.get(
        "/languages",
        response_model=LanguagesResponse,
        tags=["videos"],
        summary="List translation target languages",
    )
    async def list_languages() -> LanguagesResponse:
        return LanguagesResponse(languages=dict(LANGUAGE_MAP))

    @app.post(
        "/upload",
        response_model=ProcessedVideoResponse,
        tags=["videos"],
        summary="Upload and process a video",
        description=(
            "Upload a video file. The server converts it to HLS, extracts and "
            "transcribes the audio, translates the transcript, and writes "
            "subtitle files. Responds once processing has finished."
        ),
        responses={
            400: {"model": ErrorResponse, "description": "Missing or unsupported file"},
            500: {"model": ErrorResponse, "description": "A pipeline stage failed"},
        },
    )
    async def upload_video(
        file: Annotated[
            Optional[UploadFile],
            File(description="Video file to process"),
        ] = None,
        targetLang: Annotated[
            Optional[str],
            Form(description="Target language code for translated subtitles."),
        ] = None,
        sourceLang: Annotated[
            Optional[str],
            Form(description="Source language hint used when detection fails."),
        ] = None,
    ):
        if file is None or not file.filename:
            return _error(400, "No file uploaded")

        ext = Path(file.filename).suffix.lower()
        if ext not in SUPPORTED_VIDEO_FORMATS:
            return _error(
                400,
                "Unsupported file type '{}'. Supported formats: {}".format(
                    ext, ", ".join(sorted(SUPPORTED_VIDEO_FORMATS))
                ),
            )

        video_path = _save_upload(file, config.uploads_root)
        logger.info("Processing video: %s", video_path)

        try:
            result = await pipeline.process(
                video_path,
                target_language=targetLang or None,
                source_language=sourceLang or None,
            )
        except PipelineFailed as exc:
            return _error(
                500,
                "Failed to process video",
                stage=exc.stage.value,
                details=str(exc.cause),
            )

        return result_to_response(config, result)

    return app


def run_api(config: Optional[PipelineConfig] = None, host: str = "0.0.0.0") -> None:
    """Serve the app with uvicorn on the configured port."""
    import uvicorn

    config = config or PipelineConfig.from_env()
    uvicorn.run(create_app(config), host=host, port=config.port)
