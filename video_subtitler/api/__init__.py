"""Remote provider clients for speech recognition and translation.

WHY: Two network-facing stages (transcribe, translate) talk to third-party
HTTP services. Keeping every httpx call inside this package means the
rest of the pipeline only sees typed results and stage errors.

RULES:
- All HTTP calls go through DeepgramClient or a TranslationProvider
- Provider credentials and URLs arrive via constructors (PipelineConfig)
"""

from video_subtitler.api.client import DeepgramClient
from video_subtitler.api.translation import (
    LibreTranslateProvider,
    LingvaProvider,
    MyMemoryProvider,
    TranslationChain,
    TranslationProvider,
    build_translation_chain,
)

__all__ = [
    "DeepgramClient",
    "LibreTranslateProvider",
    "LingvaProvider",
    "MyMemoryProvider",
    "TranslationChain",
    "TranslationProvider",
    "build_translation_chain",
]
