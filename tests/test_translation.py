"""Tests for the translation fallback chain and its providers.

WHY: Translation must never fail a job. These tests pin the provider
order, the per-provider input caps, and the "original text, not
translated" outcome when every provider fails.

HOW: httpx.MockTransport routes requests by host so one handler can play
all three providers. Timeouts use a provider that sleeps past the chain's
per-attempt bound.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import List

import httpx
import pytest

from video_subtitler.api.translation import (
    LibreTranslateProvider,
    LingvaProvider,
    MyMemoryProvider,
    TranslationChain,
    TranslationProvider,
    build_translation_chain,
)

LIBRE_URL = "http://libre.test/translate"
MYMEMORY_URL = "http://mymemory.test/get"
LINGVA_URL = "http://lingva.test/api/v1"


class Router:
    """MockTransport handler that dispatches on host and records requests."""

    def __init__(self, libre=None, mymemory=None, lingva=None):
        self.routes = {"libre.test": libre, "mymemory.test": mymemory, "lingva.test": lingva}
        self.requests: List[httpx.Request] = []

    @property
    def hosts(self) -> List[str]:
        return [r.url.host for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes[request.url.host]
        if route is None:
            return httpx.Response(503, text="unavailable")
        return route(request)


def _chain(router, timeout_s=1.0) -> TranslationChain:
    return TranslationChain(
        [LibreTranslateProvider(LIBRE_URL), MyMemoryProvider(MYMEMORY_URL), LingvaProvider(LINGVA_URL)],
        timeout_s=timeout_s,
        transport=httpx.MockTransport(router),
    )


def _translate(chain, text, source="en", target="es"):
    return asyncio.run(chain.translate(text, source, target))


# ---------------------------------------------------------------------------
# Short circuits
# ---------------------------------------------------------------------------


class TestShortCircuit:
    def test_same_language_makes_no_calls(self):
        router = Router()
        result = _translate(_chain(router), "Hello", "en", "en")
        assert result.text == "Hello"
        assert result.translated is False
        assert router.requests == []

    def test_same_language_after_normalisation(self):
        router = Router()
        result = _translate(_chain(router), "Hello", "en-US", "EN")
        assert result.translated is False
        assert router.requests == []

    def test_blank_text_makes_no_calls(self):
        router = Router()
        result = _translate(_chain(router), "   ", "en", "es")
        assert result.text == "   "
        assert result.translated is False
        assert router.requests == []


# ---------------------------------------------------------------------------
# Fallback order
# ---------------------------------------------------------------------------


class TestFallbackOrder:
    def test_first_success_stops_chain(self):
        router = Router(libre=lambda r: httpx.Response(200, json={"translatedText": "Hola"}))
        result = _translate(_chain(router), "Hello")
        assert result.text == "Hola"
        assert result.translated is True
        assert result.provider == "LibreTranslate"
        assert router.hosts == ["libre.test"]

    def test_falls_through_to_mymemory(self):
        router = Router(
            mymemory=lambda r: httpx.Response(200, json={"responseData": {"translatedText": "Hola"}}),
        )
        result = _translate(_chain(router), "Hello")
        assert result.provider == "MyMemory"
        assert router.hosts == ["libre.test", "mymemory.test"]

    def test_falls_through_to_lingva(self):
        router = Router(
            libre=lambda r: httpx.Response(200, json={"translatedText": ""}),
            mymemory=lambda r: httpx.Response(200, json={"responseData": None}),
            lingva=lambda r: httpx.Response(200, json={"translation": "Hola"}),
        )
        result = _translate(_chain(router), "Hello")
        assert result.text == "Hola"
        assert result.provider == "Lingva"
        assert router.hosts == ["libre.test", "mymemory.test", "lingva.test"]

    def test_non_json_body_falls_through(self):
        router = Router(
            libre=lambda r: httpx.Response(200, text="<html>"),
            mymemory=lambda r: httpx.Response(200, json={"responseData": {"translatedText": "Hola"}}),
        )
        assert _translate(_chain(router), "Hello").provider == "MyMemory"

    def test_transport_error_falls_through(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        router = Router(libre=refuse, lingva=lambda r: httpx.Response(200, json={"translation": "Hola"}))
        assert _translate(_chain(router), "Hello").provider == "Lingva"

    def test_all_fail_returns_original(self):
        router = Router()
        result = _translate(_chain(router), "Hello")
        assert result.text == "Hello"
        assert result.translated is False
        assert result.provider is None
        assert router.hosts == ["libre.test", "mymemory.test", "lingva.test"]


# ---------------------------------------------------------------------------
# Provider request shapes
# ---------------------------------------------------------------------------


class TestProviderRequests:
    def test_libretranslate_posts_json(self):
        seen = {}

        def libre(request):
            seen["method"] = request.method
            seen["body"] = request.read()
            return httpx.Response(200, json={"translatedText": "Hola"})

        _translate(_chain(Router(libre=libre)), "Hello", "en-GB", "es")
        assert seen["method"] == "POST"
        assert json.loads(seen["body"]) == {"q": "Hello", "source": "en", "target": "es", "format": "text"}

    def test_mymemory_truncates_to_500_chars(self):
        seen = {}

        def mymemory(request):
            seen["params"] = request.url.params
            return httpx.Response(200, json={"responseData": {"translatedText": "ok"}})

        _translate(_chain(Router(mymemory=mymemory)), "x" * 800)
        assert len(seen["params"]["q"]) == 500
        assert seen["params"]["langpair"] == "en|es"

    def test_lingva_encodes_text_in_path_and_truncates(self):
        seen = {}

        def lingva(request):
            seen["raw_path"] = request.url.raw_path.decode("ascii")
            return httpx.Response(200, json={"translation": "ok"})

        text = "a/b c?" + "y" * 2000
        _translate(_chain(Router(lingva=lingva)), text)
        assert seen["raw_path"].startswith("/api/v1/en/es/a%2Fb%20c%3F")
        assert seen["raw_path"].endswith("y" * 10)
        assert seen["raw_path"].count("y") == 1000 - len("a/b c?")

    def test_caps_do_not_leak_into_other_providers(self):
        bodies = []

        def libre(request):
            bodies.append(request.read())
            return httpx.Response(500)

        text = "z" * 900
        _translate(_chain(Router(libre=libre)), text)
        assert text.encode() in bodies[0]


# ---------------------------------------------------------------------------
# Timeouts
# ---------------------------------------------------------------------------


class SlowProvider(TranslationProvider):
    def __init__(self, calls):
        self.calls = calls

    @property
    def name(self):
        return "Slow"

    async def translate(self, client, text, source, target):
        self.calls.append("slow")
        await asyncio.sleep(5)
        return "too late"


class FixedProvider(TranslationProvider):
    def __init__(self, calls, answer):
        self.calls = calls
        self.answer = answer

    @property
    def name(self):
        return "Fixed"

    async def translate(self, client, text, source, target):
        self.calls.append("fixed")
        return self.answer


class TestTimeouts:
    def test_slow_provider_is_abandoned(self):
        calls = []
        chain = TranslationChain([SlowProvider(calls), FixedProvider(calls, "Hola")], timeout_s=0.05)
        result = _translate(chain, "Hello")
        assert result.text == "Hola"
        assert result.provider == "Fixed"
        assert calls == ["slow", "fixed"]

    def test_every_provider_attempted_once(self):
        calls = []
        chain = TranslationChain([SlowProvider(calls), SlowProvider(calls)], timeout_s=0.05)
        result = _translate(chain, "Hello")
        assert result.translated is False
        assert calls == ["slow", "slow"]

    def test_all_timeouts_bounded_by_sum_of_attempts(self):
        calls = []
        chain = TranslationChain([SlowProvider(calls) for _ in range(3)], timeout_s=0.1)

        started = time.monotonic()
        result = _translate(chain, "Hello")
        elapsed = time.monotonic() - started

        assert result.text == "Hello"
        assert result.translated is False
        assert calls == ["slow", "slow", "slow"]
        assert elapsed < 0.3 + 0.5


class TestBuildChain:
    def test_default_order_and_timeout(self, config):
        chain = build_translation_chain(config)
        assert [p.name for p in chain.providers] == ["LibreTranslate", "MyMemory", "Lingva"]
        assert chain.timeout_s == pytest.approx(0.5)

    def test_provider_caps(self):
        assert LibreTranslateProvider(LIBRE_URL).max_chars is None
        assert MyMemoryProvider(MYMEMORY_URL).max_chars == 500
        assert LingvaProvider(LINGVA_URL).max_chars == 1000
