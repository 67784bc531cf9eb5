"""Machine translation through an ordered fallback chain of free providers.

WHY: Free translation endpoints are individually unreliable (rate limits,
outages, input caps). Trying several in a fixed order gives a usable
translation most of the time, and when none answers the job still
completes with the original text. Translation is an enhancement, never a
reason to fail a job.

HOW: Each provider implements one capability, ``attempt()``: send the
text, return the translated string or None. TranslationChain iterates an
ordered provider list, bounding each attempt with ``asyncio.wait_for`` and
stopping at the first non-empty result. The result carries an explicit
``translated`` flag so callers never compare strings.

RULES:
- Same source/target language or blank text -> input returned, no calls
- Providers run strictly sequentially, each attempted exactly once
- Every provider error or timeout is logged and falls to the next provider
- Provider input caps truncate the text for that provider's call only
- All providers failing -> TranslationResult(text=input, translated=False)
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from urllib.parse import quote

import httpx

from video_subtitler.config import PipelineConfig, normalize_language
from video_subtitler.core.ir import TranslationResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


class TranslationProvider(ABC):
    """One translation backend: attempt a translation, return text or None.

    RULES:
    - ``max_chars`` (when set) truncates the input before this provider's call
    - ``translate()`` may raise; the chain treats any error as a failure
    - An empty or missing translated field is reported as None
    """

    max_chars: Optional[int] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider name used in logs and results."""

    @abstractmethod
    async def translate(
        self,
        client: httpx.AsyncClient,
        text: str,
        source: str,
        target: str,
    ) -> Optional[str]:
        """Call the provider once and return the translated string, if any."""

    async def attempt(
        self,
        client: httpx.AsyncClient,
        text: str,
        source: str,
        target: str,
    ) -> Optional[str]:
        if self.max_chars is not None:
            text = text[:self.max_chars]
        translated = await self.translate(client, text, source, target)
        if translated and translated.strip():
            return translated
        return None


class LibreTranslateProvider(TranslationProvider):
    """Primary provider: LibreTranslate, JSON POST."""

    def __init__(self, url: str) -> None:
        self.url = url

    @property
    def name(self) -> str:
        return "LibreTranslate"

    async def translate(
        self,
        client: httpx.AsyncClient,
        text: str,
        source: str,
        target: str,
    ) -> Optional[str]:
        resp = await client.post(
            self.url,
            json={"q": text, "source": source, "target": target, "format": "text"},
        )
        resp.raise_for_status()
        data = resp.json() or {}
        return data.get("translatedText")


class MyMemoryProvider(TranslationProvider):
    """Secondary provider: MyMemory, query-parameter GET, 500-character cap."""

    max_chars = 500

    def __init__(self, url: str) -> None:
        self.url = url

    @property
    def name(self) -> str:
        return "MyMemory"

    async def translate(
        self,
        client: httpx.AsyncClient,
        text: str,
        source: str,
        target: str,
    ) -> Optional[str]:
        resp = await client.get(
            self.url,
            params={"q": text, "langpair": "{}|{}".format(source, target)},
        )
        resp.raise_for_status()
        data = resp.json() or {}
        return (data.get("responseData") or {}).get("translatedText")


class LingvaProvider(TranslationProvider):
    """Tertiary provider: Lingva, text in the URL path, 1000-character cap."""

    max_chars = 1000

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return "Lingva"

    async def translate(
        self,
        client: httpx.AsyncClient,
        text: str,
        source: str,
        target: str,
    ) -> Optional[str]:
        url = "{}/{}/{}/{}".format(self.base_url, source, target, quote(text, safe=""))
        resp = await client.get(url)
        resp.raise_for_status()
        data = resp.json() or {}
        return data.get("translation")


class TranslationChain:
    """Ordered list of providers tried until the first success.

    RULES:
    - Provider order is the order given to the constructor
    - Each attempt is bounded by timeout_s and never retried
    - One httpx.AsyncClient is shared by all attempts of one translate() call
    """

    def __init__(
        self,
        providers: Sequence[TranslationProvider],
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.providers: List[TranslationProvider] = list(providers)
        self.timeout_s = timeout_s
        self._transport = transport

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        """Translate ``text`` from ``source_lang`` to ``target_lang``.

        Never raises for provider failures; see module RULES.
        """
        source = normalize_language(source_lang)
        target = normalize_language(target_lang)

        if source == target or not text.strip():
            return TranslationResult(text=text, translated=False)

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_s),
            transport=self._transport,
        ) as client:
            for provider in self.providers:
                logger.info("Translating with %s from %s to %s...", provider.name, source, target)
                try:
                    translated = await asyncio.wait_for(
                        provider.attempt(client, text, source, target),
                        timeout=self.timeout_s,
                    )
                except asyncio.TimeoutError:
                    logger.warning("%s timed out after %.1fs", provider.name, self.timeout_s)
                    continue
                except (httpx.HTTPError, ValueError, AttributeError, TypeError) as exc:
                    logger.warning("%s error: %s", provider.name, exc)
                    continue

                if translated is not None:
                    logger.info("%s successful", provider.name)
                    return TranslationResult(text=translated, translated=True, provider=provider.name)
                logger.warning("%s returned no translation", provider.name)

        logger.warning("All translation services failed, returning original text")
        return TranslationResult(text=text, translated=False)


def build_translation_chain(
    config: PipelineConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TranslationChain:
    """Default chain: LibreTranslate, then MyMemory, then Lingva."""
    providers = [
        LibreTranslateProvider(config.libretranslate_url),
        MyMemoryProvider(config.mymemory_url),
        LingvaProvider(config.lingva_url),
    ]
    return TranslationChain(providers, timeout_s=config.translation_timeout_s, transport=transport)
