"""Pydantic response models for the HTTP upload API.

WHY: The front-end player reads a fixed JSON shape (camelCase keys,
public URLs). Pydantic models pin that shape, validate it at runtime, and
document it in the /docs UI.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Field names are camelCase to match the existing front-end contract
- translatedSubtitleUrl is null when no translation happened
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field


class ProcessedVideoResponse(BaseModel):
    """Result of a successfully processed upload."""

    message: str = Field(
        default="Video processed successfully",
        description="Human-readable outcome.",
    )
    lessonId: str = Field(description="Unique job identifier.")
    videoUrl: str = Field(description="Public URL of the HLS manifest.")
    subtitleUrl: str = Field(description="Public URL of the source-language captions.")
    translatedSubtitleUrl: Optional[str] = Field(
        default=None,
        description="Public URL of the translated captions, or null.",
    )
    transcript: str = Field(description="Full source-language transcript.")
    translatedText: str = Field(
        description="Translated transcript (equals transcript when not translated).",
    )
    translated: bool = Field(description="Whether a translation provider succeeded.")
    originalLang: str = Field(description="Detected source language code.")
    targetLang: str = Field(description="Requested target language code.")
    wordCount: int = Field(description="Number of timed words in the transcript.")


class ErrorResponse(BaseModel):
    """Consistent error body for 4xx/5xx responses."""

    error: str = Field(description="Short error summary.")
    stage: Optional[str] = Field(
        default=None,
        description="Pipeline stage that failed, for processing errors.",
    )
    details: Optional[str] = Field(default=None, description="Underlying cause.")


class LanguagesResponse(BaseModel):
    """Languages offered as translation targets."""

    languages: Dict[str, str] = Field(description="Language code to display name.")


class HealthResponse(BaseModel):
    """Liveness check response."""

    status: str = Field(description="Always 'ok' when the server is up.")
    version: str = Field(description="Package version.")
