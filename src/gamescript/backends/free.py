"""Free, rate-limited web endpoints (MyMemory, Lingva, Google web).

These take one string per request. Calls are strictly sequential with a fixed
pause after each one, and any per-item failure echoes the original text.
"""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from urllib.parse import quote

import aiohttp

from gamescript.backends.base import TranslationProvider
from gamescript.core.constants import FREE_ENDPOINT_DELAY

logger = logging.getLogger(__name__)

MYMEMORY_URL = "https://api.mymemory.translated.net/get"
LINGVA_URL = "https://lingva.ml/api/v1"


class PerItemProvider(TranslationProvider):
    """Base for endpoints that translate one text per HTTP request."""

    # Exceptions that turn one item into an echo instead of failing the batch
    item_errors: tuple[type[BaseException], ...] = (
        aiohttp.ClientError, asyncio.TimeoutError, KeyError, TypeError, ValueError,
    )

    def __init__(self, delay: float = FREE_ENDPOINT_DELAY) -> None:
        self._delay = delay
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    @abstractmethod
    async def _translate_one(self, text: str, target_lang: str) -> str | None:
        """Translate one text. None means "keep the original"."""

    async def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        format_hint: str | None = None,
        context: str | None = None,
    ) -> list[str]:
        results: list[str] = []
        for text in texts:
            try:
                translated = await self._translate_one(text, target_lang)
            except self.item_errors as e:
                logger.warning("%s failed for %r: %s", self.name, text[:50], e)
                translated = None
            results.append(translated or text)
            if self._delay:
                await asyncio.sleep(self._delay)
        return results

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()


class MyMemoryProvider(PerItemProvider):
    name = "mymemory"

    async def _translate_one(self, text: str, target_lang: str) -> str | None:
        session = await self._get_session()
        params = {"q": text, "langpair": f"auto|{target_lang}"}
        async with session.get(MYMEMORY_URL, params=params) as response:
            response.raise_for_status()
            data = await response.json(content_type=None)
        # Quota and validation errors come back as HTTP 200 with the message
        # in translatedText and the real code in responseStatus
        status = str(data.get("responseStatus"))
        if status != "200":
            logger.warning("MyMemory refused %r (status %s): %s",
                           text[:50], status, data.get("responseDetails", ""))
            return None
        return data["responseData"]["translatedText"]


class LingvaProvider(PerItemProvider):
    name = "lingva"

    def __init__(self, base_url: str = LINGVA_URL, delay: float = FREE_ENDPOINT_DELAY) -> None:
        super().__init__(delay=delay)
        self._base_url = base_url.rstrip("/")

    async def _translate_one(self, text: str, target_lang: str) -> str | None:
        session = await self._get_session()
        url = f"{self._base_url}/auto/{quote(target_lang, safe='')}/{quote(text, safe='')}"
        async with session.get(url) as response:
            response.raise_for_status()
            data = await response.json(content_type=None)
        return data.get("translation")


def google_code(target_lang: str) -> str:
    """``ES`` -> ``es``; regional codes keep their region, ``zh-cn`` -> ``zh-CN``."""
    lang, _, region = target_lang.partition("-")
    return f"{lang.lower()}-{region.upper()}" if region else lang.lower()


class GoogleProvider(PerItemProvider):
    """Google web translation through deep-translator. The client is blocking."""

    name = "google"

    def __init__(self, delay: float = FREE_ENDPOINT_DELAY) -> None:
        try:
            import deep_translator
            from deep_translator import exceptions
        except ImportError:
            raise ImportError(
                "Google provider requires the 'deep-translator' package. "
                "Install it with: pip install gamescript[google]"
            ) from None
        super().__init__(delay=delay)
        self._deep_translator = deep_translator
        self._translators: dict[str, object] = {}
        self.item_errors = (
            *PerItemProvider.item_errors,
            exceptions.BaseError,
            exceptions.RequestError,
            exceptions.TooManyRequests,
            OSError,
        )

    def _translator_for(self, target_lang: str):
        code = google_code(target_lang)
        if code not in self._translators:
            self._translators[code] = self._deep_translator.GoogleTranslator(
                source="auto", target=code,
            )
        return self._translators[code]

    async def _translate_one(self, text: str, target_lang: str) -> str | None:
        return self._translator_for(target_lang).translate(text)
