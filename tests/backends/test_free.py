"""Tests for the free per-item endpoints (network mocked)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from gamescript.backends.free import (
    GoogleProvider,
    LingvaProvider,
    MyMemoryProvider,
    PerItemProvider,
    google_code,
)


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Returns one canned JSON payload per GET, in order."""

    def __init__(self, *payloads):
        self._payloads = list(payloads)
        self.requests: list[tuple[str, dict | None]] = []

    def get(self, url, params=None):
        self.requests.append((url, params))
        return FakeResponse(self._payloads.pop(0))


def _with_session(provider, session):
    return patch.object(provider, "_get_session", AsyncMock(return_value=session))


class TestPerItemProvider:
    def test_translates_each_item_in_order(self):
        provider = MyMemoryProvider(delay=0)
        with patch.object(provider, "_translate_one", AsyncMock(side_effect=["Hola", "Adiós"])) as one:
            results = asyncio.run(provider.translate_batch(["Hello", "Bye"], "es"))
        assert results == ["Hola", "Adiós"]
        assert [c.args for c in one.call_args_list] == [("Hello", "es"), ("Bye", "es")]

    def test_failure_echoes_original(self):
        provider = LingvaProvider(delay=0)
        side_effect = [aiohttp.ClientError("boom"), "Adiós", None]
        with patch.object(provider, "_translate_one", AsyncMock(side_effect=side_effect)):
            results = asyncio.run(provider.translate_batch(["Hello", "Bye", "Later"], "es"))
        assert results == ["Hello", "Adiós", "Later"]

    def test_malformed_payload_echoes_original(self):
        provider = MyMemoryProvider(delay=0)
        with patch.object(provider, "_translate_one", AsyncMock(side_effect=KeyError("responseData"))):
            assert asyncio.run(provider.translate_batch(["Hello"], "es")) == ["Hello"]

    def test_pauses_after_each_call(self):
        provider = MyMemoryProvider(delay=0.2)
        with patch.object(provider, "_translate_one", AsyncMock(return_value="x")), \
                patch("gamescript.backends.free.asyncio.sleep", AsyncMock()) as sleep:
            asyncio.run(provider.translate_batch(["a", "b", "c"], "es"))
        assert sleep.await_count == 3
        sleep.assert_awaited_with(0.2)

    def test_subclass_must_translate_one(self):
        class Incomplete(PerItemProvider):
            name = "incomplete"

        with pytest.raises(TypeError):
            Incomplete()

    def test_close_without_session(self):
        asyncio.run(LingvaProvider(delay=0).close())

    def test_lingva_base_url_trailing_slash(self):
        provider = LingvaProvider(base_url="https://example.org/api/v1/")
        assert provider._base_url == "https://example.org/api/v1"


class TestMyMemory:
    def test_ok_status(self):
        provider = MyMemoryProvider(delay=0)
        session = FakeSession({"responseStatus": 200, "responseData": {"translatedText": "Hola"}})
        with _with_session(provider, session):
            assert asyncio.run(provider.translate_batch(["Hello"], "es")) == ["Hola"]
        assert session.requests[0][1] == {"q": "Hello", "langpair": "auto|es"}

    def test_quota_message_not_used_as_translation(self, caplog):
        provider = MyMemoryProvider(delay=0)
        session = FakeSession(
            {
                "responseStatus": "429",
                "responseDetails": "MYMEMORY WARNING: YOU USED ALL AVAILABLE FREE TRANSLATIONS",
                "responseData": {"translatedText": "MYMEMORY WARNING: YOU USED ALL AVAILABLE"},
            },
            {"responseStatus": "200", "responseData": {"translatedText": "Adiós"}},
        )
        with _with_session(provider, session):
            results = asyncio.run(provider.translate_batch(["Hello", "Bye"], "es"))
        assert results == ["Hello", "Adiós"]
        assert "status 429" in caplog.text


class FakeBaseError(Exception):
    pass


class FakeTooManyRequests(Exception):
    pass


@pytest.fixture
def deep_translator():
    fake = MagicMock()
    fake.exceptions.BaseError = FakeBaseError
    fake.exceptions.RequestError = type("RequestError", (Exception,), {})
    fake.exceptions.TooManyRequests = FakeTooManyRequests
    with patch.dict("sys.modules", {"deep_translator": fake}):
        yield fake


class TestGoogle:
    def test_code_normalization(self):
        assert google_code("ES") == "es"
        assert google_code("zh-cn") == "zh-CN"

    def test_translates_with_auto_source(self, deep_translator):
        deep_translator.GoogleTranslator.return_value.translate.side_effect = ["Hola", "Adiós"]
        provider = GoogleProvider(delay=0)
        results = asyncio.run(provider.translate_batch(["Hello", "Bye"], "ES"))
        assert results == ["Hola", "Adiós"]
        deep_translator.GoogleTranslator.assert_called_once_with(source="auto", target="es")

    def test_library_errors_echo_original(self, deep_translator):
        deep_translator.GoogleTranslator.return_value.translate.side_effect = [
            FakeTooManyRequests("slow down"), FakeBaseError("bad payload"), ConnectionError("down"), "Hi",
        ]
        provider = GoogleProvider(delay=0)
        results = asyncio.run(provider.translate_batch(["a", "b", "c", "d"], "en"))
        assert results == ["a", "b", "c", "Hi"]

    def test_paced_like_other_free_endpoints(self, deep_translator):
        deep_translator.GoogleTranslator.return_value.translate.return_value = "x"
        provider = GoogleProvider(delay=0.5)
        with patch("gamescript.backends.free.asyncio.sleep", AsyncMock()) as sleep:
            asyncio.run(provider.translate_batch(["a", "b"], "es"))
        assert sleep.await_count == 2

    def test_missing_library(self):
        with patch.dict("sys.modules", {"deep_translator": None}):
            with pytest.raises(ImportError, match="gamescript\\[google\\]"):
                GoogleProvider()
